"""Entry point for the portfolio history tracker API.

Wires all components together and serves the FastAPI app with uvicorn.
The lifespan context owns the shared HTTP client and the rate cache
connection so both are opened once and closed on shutdown.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. Shared httpx AsyncClient
4. Quote providers (Yahoo, Investidor10)
5. Rate provider (SGS), optionally behind the SQLite cache
6. HistoryService
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from tracker.api.app import create_app
from tracker.config import AppSettings
from tracker.data.cached_rates import CachedRateProvider
from tracker.data.database import RateCacheDatabase
from tracker.data.store import RateSeriesStore
from tracker.history.service import HistoryService
from tracker.logging import get_logger, setup_logging
from tracker.providers.base import RateSeriesProvider
from tracker.providers.bcb import BcbRateProvider
from tracker.providers.http import create_http_client
from tracker.providers.investidor10 import Investidor10QuoteProvider
from tracker.providers.yahoo import YahooQuoteProvider


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Does NOT open the cache database; that happens in the lifespan.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    http_client = create_http_client(settings.http)

    yahoo = YahooQuoteProvider(http_client, settings.http)
    investidor10 = Investidor10QuoteProvider(http_client, settings.http)

    rate_provider: RateSeriesProvider = BcbRateProvider(http_client, settings.http)
    database = None
    store = None
    if settings.rate_cache.enabled:
        database = RateCacheDatabase(settings.rate_cache.db_path)
        store = RateSeriesStore(database)
        rate_provider = CachedRateProvider(
            rate_provider, store, settings.rate_cache.ttl_seconds
        )

    history_service = HistoryService(
        quote_provider=yahoo,
        rate_provider=rate_provider,
        settings=settings.benchmarks,
        b3_provider=investidor10,
    )

    return {
        "http_client": http_client,
        "database": database,
        "rate_store": store,
        "history_service": history_service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the rate cache on startup; close it and the HTTP client on shutdown."""
    logger = get_logger("tracker.main")
    settings = app.state.settings
    components = app.state.components

    database = components["database"]
    if database is not None:
        await database.connect()

    app.state.history_service = components["history_service"]
    app.state.rate_store = components["rate_store"]
    app.state.cache_control = settings.api.cache_control

    logger.info(
        "lifespan_started",
        rate_cache=settings.rate_cache.enabled,
        ibov=settings.benchmarks.ibov_symbol,
        ifix=settings.benchmarks.ifix_symbol,
    )

    try:
        yield
    finally:
        await components["http_client"].aclose()
        if database is not None:
            await database.close()
        logger.info("portfolio_history_tracker_stopped")


async def run() -> None:
    """Run the history API server."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("tracker.main")

    # 3-6. Build all components
    components = _build_components(settings)

    app = create_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components

    logger.info("starting_api", host=settings.api.host, port=settings.api.port)

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,  # keep the structlog handler from setup_logging
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
