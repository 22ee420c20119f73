"""JSON API endpoints: aligned performance history and service health."""

from __future__ import annotations

import aiosqlite
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from tracker.exceptions import AssetNotFound, InternalError, InvalidInput

log = structlog.get_logger(__name__)

router = APIRouter()


def _headers(request: Request) -> dict[str, str]:
    """CORS and CDN caching headers sent on every history response."""
    return {
        "Access-Control-Allow-Origin": "*",
        "Cache-Control": request.app.state.cache_control,
    }


@router.options("/history")
async def history_preflight(request: Request) -> Response:
    """CORS preflight."""
    return Response(status_code=200, headers=_headers(request))


@router.get("/history")
async def get_history(
    request: Request,
    ticker: str | None = None,
    range: str | None = None,  # noqa: A002
) -> JSONResponse:
    """Aligned asset/benchmark/macro history for one ticker and range.

    Responds 400 for malformed input, 404 when the asset has no data, and
    500 with a generic message for unexpected failures.
    """
    service = request.app.state.history_service
    headers = _headers(request)

    try:
        result = await service.get_history(ticker, range)
    except InvalidInput as e:
        return JSONResponse(status_code=400, content={"error": str(e)}, headers=headers)
    except AssetNotFound:
        return JSONResponse(
            status_code=404, content={"error": "Asset not found"}, headers=headers
        )
    except InternalError:
        return JSONResponse(status_code=500, content={"error": "Internal error"}, headers=headers)
    except Exception:
        log.exception("history_request_failed", ticker=ticker, range=range)
        return JSONResponse(status_code=500, content={"error": "Internal error"}, headers=headers)

    return JSONResponse(content=result.to_dict(), headers=headers)


@router.get("/health")
async def get_health(request: Request) -> JSONResponse:
    """Liveness plus rate cache status (when the cache is enabled)."""
    store = request.app.state.rate_store
    if store is None:
        return JSONResponse(content={"status": "ok", "rate_cache": None})

    try:
        series = await store.get_cache_status()
    except aiosqlite.Error as e:
        log.warning("rate_cache_status_failed", error=str(e))
        return JSONResponse(content={"status": "degraded", "rate_cache": None})

    return JSONResponse(content={"status": "ok", "rate_cache": series})
