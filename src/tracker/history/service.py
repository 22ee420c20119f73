"""History request orchestration: validate, fetch concurrently, reconcile.

All five upstream reads (asset, Ibovespa, IFIX, CDI, IPCA) are independent
and issued together. Only two conditions end a request early: a malformed
ticker or range (InvalidInput, before any upstream call) and an asset with
no usable prices (AssetNotFound). Any other upstream weakness downgrades a
single channel and is logged.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date
from typing import TypeVar

import structlog

from tracker.config import BenchmarkSettings
from tracker.exceptions import AssetNotFound, InternalError, TrackerError
from tracker.history.engine import align_series
from tracker.history.ranges import (
    is_intraday,
    rate_window_start,
    validate_range,
    validate_ticker,
)
from tracker.logging import get_logger
from tracker.models import HistoryResult, RateMap, RawSeries
from tracker.providers.base import QuoteHistoryProvider, RateSeriesProvider
from tracker.providers.fallback import FallbackQuoteProvider

logger = get_logger(__name__)

T = TypeVar("T")


class HistoryService:
    """Builds the aligned performance history for one ticker and range.

    Args:
        quote_provider: Quotes for benchmarks, indices, and intraday ranges.
        rate_provider: CDI and IPCA rate series.
        settings: Benchmark symbols, series codes, and fallback rates.
        b3_provider: Optional daily-close source tried first for B3 assets
            on non-intraday ranges, before quote_provider.
        today: Clock for the rate window; injectable for tests.
    """

    def __init__(
        self,
        quote_provider: QuoteHistoryProvider,
        rate_provider: RateSeriesProvider,
        settings: BenchmarkSettings,
        b3_provider: QuoteHistoryProvider | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._quotes = quote_provider
        self._rates = rate_provider
        self._settings = settings
        self._b3 = b3_provider
        self._today = today

    def asset_provider_for(self, ticker: str, range_key: str) -> QuoteHistoryProvider:
        """Pick the provider chain for the primary asset."""
        if self._b3 is not None and not is_intraday(range_key) and "^" not in ticker:
            return FallbackQuoteProvider([self._b3, self._quotes])
        return self._quotes

    async def get_history(self, ticker: str | None, range_key: str | None) -> HistoryResult:
        """Fetch and reconcile the history of ticker over range_key.

        Raises:
            InvalidInput: Malformed ticker or range.
            AssetNotFound: The asset has no usable prices.
            InternalError: Alignment failed unexpectedly.
        """
        ticker = validate_ticker(ticker)
        range_key = validate_range(range_key)

        with structlog.contextvars.bound_contextvars(ticker=ticker, range=range_key):
            return await self._build(ticker, range_key)

    async def _build(self, ticker: str, range_key: str) -> HistoryResult:
        settings = self._settings
        end = self._today()
        start = rate_window_start(range_key, end)
        asset_provider = self.asset_provider_for(ticker, range_key)

        asset, ibov, ifix, cdi_rates, ipca_rates = await asyncio.gather(
            _guard("asset", lambda: asset_provider.fetch_quote_history(ticker, range_key), None),
            _guard(
                "ibov",
                lambda: self._quotes.fetch_quote_history(settings.ibov_symbol, range_key),
                None,
            ),
            _guard(
                "ifix",
                lambda: self._quotes.fetch_quote_history(settings.ifix_symbol, range_key),
                None,
            ),
            _guard(
                "cdi",
                lambda: self._rates.fetch_rate_series(settings.cdi_series, start, end),
                {},
            ),
            _guard(
                "ipca",
                lambda: self._rates.fetch_rate_series(settings.ipca_series, start, end),
                {},
            ),
        )

        _log_degraded(ibov, ifix, cdi_rates, ipca_rates)

        if asset is None or asset.first_valid_price() is None:
            logger.info("asset_not_found")
            raise AssetNotFound("Asset not found")

        try:
            points = align_series(
                asset,
                ibov,
                ifix,
                cdi_rates,
                ipca_rates,
                fallback_cdi_daily=settings.fallback_cdi_daily_pct,
                fallback_ipca_monthly=settings.fallback_ipca_monthly_pct,
            )
        except TrackerError:
            raise
        except Exception as e:
            logger.exception("alignment_failed")
            raise InternalError("Internal error") from e

        logger.info("history_built", points=len(points))
        return HistoryResult(ticker=ticker, range=range_key, points=points)


async def _guard(source: str, fetch: Callable[[], Awaitable[T]], default: T) -> T:
    """Run one upstream read, degrading any exception to default."""
    try:
        return await fetch()
    except Exception as e:
        logger.warning("upstream_degraded", source=source, error=str(e))
        return default


def _log_degraded(
    ibov: RawSeries | None,
    ifix: RawSeries | None,
    cdi_rates: RateMap,
    ipca_rates: RateMap,
) -> None:
    missing = [
        name
        for name, value in (
            ("ibov", ibov),
            ("ifix", ifix),
            ("cdi", cdi_rates),
            ("ipca", ipca_rates),
        )
        if not value
    ]
    if missing:
        logger.warning("upstream_degraded", sources=missing)
