"""Shared async HTTP client for all upstream providers."""

import httpx

from tracker.config import HttpSettings

BASE_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "X-Requested-With": "XMLHttpRequest",
}


def create_http_client(settings: HttpSettings) -> httpx.AsyncClient:
    """Build the process-wide AsyncClient.

    Timeouts are passed per request by each provider; the client-level
    timeout only bounds calls that forget to.
    """
    return httpx.AsyncClient(
        headers={**BASE_HEADERS, "User-Agent": settings.user_agent},
        timeout=httpx.Timeout(10.0, connect=5.0),
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        ),
        verify=settings.verify_ssl,
        follow_redirects=True,
    )
