"""Abstract upstream data provider interfaces.

The history service depends only on these interfaces, keeping the
HTTP details of each data source isolated in the concrete providers.
Implementations absorb transport and parsing failures: they log and
return None (quotes) or an empty map (rates) instead of raising.
"""

from abc import ABC, abstractmethod
from datetime import date

from tracker.models import RateMap, RawSeries


class QuoteHistoryProvider(ABC):
    """Source of historical quotes for a ticker."""

    name: str = "quotes"

    @abstractmethod
    async def fetch_quote_history(self, symbol: str, range_key: str) -> RawSeries | None:
        """Fetch the quote history of symbol over a range key (e.g. 1Y).

        Returns None when the source has no usable data for the symbol.
        """
        ...


class RateSeriesProvider(ABC):
    """Source of macroeconomic rate series (percent per period)."""

    name: str = "rates"

    @abstractmethod
    async def fetch_rate_series(self, series_id: int, start: date, end: date) -> RateMap:
        """Fetch a rate series between start and end, inclusive.

        Returns an empty map on failure.
        """
        ...
