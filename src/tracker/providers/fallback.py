"""Ordered fallback across several quote providers."""

from tracker.logging import get_logger
from tracker.models import RawSeries
from tracker.providers.base import QuoteHistoryProvider

logger = get_logger(__name__)


class FallbackQuoteProvider(QuoteHistoryProvider):
    """Try each provider in order; the first series with a valid price wins."""

    name = "fallback"

    def __init__(self, providers: list[QuoteHistoryProvider]) -> None:
        self._providers = providers

    async def fetch_quote_history(self, symbol: str, range_key: str) -> RawSeries | None:
        for provider in self._providers:
            series = await provider.fetch_quote_history(symbol, range_key)
            if series is not None and series.first_valid_price() is not None:
                logger.debug("quote_source_selected", symbol=symbol, source=provider.name)
                return series
            logger.debug("quote_source_empty", symbol=symbol, source=provider.name)
        return None
