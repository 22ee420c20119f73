"""Yahoo Finance chart API quote provider.

Uses the public v8 chart endpoint. query2 is tried first and query1 is
the fallback host; the first host returning a usable result wins.
"""

import math

import httpx

from tracker.config import HttpSettings
from tracker.history.ranges import to_yahoo_symbol, yahoo_params
from tracker.logging import get_logger
from tracker.models import RawSeries, to_decimal
from tracker.providers.base import QuoteHistoryProvider

logger = get_logger(__name__)

CHART_HOSTS = (
    "https://query2.finance.yahoo.com",
    "https://query1.finance.yahoo.com",
)


def _list_field(container: object, key: str) -> list | None:
    value = container.get(key) if isinstance(container, dict) else None
    return value if isinstance(value, list) else None


def _is_timestamp(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_chart_response(data: object) -> RawSeries | None:
    """Extract a RawSeries from a v8 chart payload.

    Returns None when the payload has no result, no timestamps, or a close
    array that is missing or not parallel to the timestamps. Rows with a
    null timestamp are dropped. An open/high/low array of the wrong length
    is discarded on its own so the closes survive.
    """
    chart = data.get("chart") if isinstance(data, dict) else None
    results = _list_field(chart, "result")
    if not results or not isinstance(results[0], dict):
        return None
    result = results[0]

    timestamps = _list_field(result, "timestamp")
    quotes = _list_field(result.get("indicators"), "quote")
    if not timestamps or not quotes:
        return None
    quote = quotes[0]
    closes = _list_field(quote, "close")
    if not closes or len(closes) != len(timestamps):
        return None

    rows = [i for i, ts in enumerate(timestamps) if _is_timestamp(ts)]
    if not rows:
        return None

    def column(name: str) -> tuple | None:
        values = _list_field(quote, name)
        if values is None:
            return None
        if len(values) != len(timestamps):
            logger.debug("yahoo_column_discarded", column=name, length=len(values))
            return None
        return tuple(to_decimal(values[i]) for i in rows)

    return RawSeries(
        timestamps=tuple(int(timestamps[i]) for i in rows),
        prices=column("close"),
        opens=column("open"),
        highs=column("high"),
        lows=column("low"),
    )


class YahooQuoteProvider(QuoteHistoryProvider):
    """Quote history from Yahoo Finance.

    Args:
        client: Shared httpx AsyncClient.
        settings: HTTP settings (timeout per request).
    """

    name = "yahoo"

    def __init__(self, client: httpx.AsyncClient, settings: HttpSettings) -> None:
        self._client = client
        self._timeout = settings.yahoo_timeout

    async def fetch_quote_history(self, symbol: str, range_key: str) -> RawSeries | None:
        yahoo_symbol = to_yahoo_symbol(symbol)
        yahoo_range, interval = yahoo_params(range_key)
        params = {"range": yahoo_range, "interval": interval, "includePrePost": "false"}
        headers = {
            "Referer": f"https://finance.yahoo.com/quote/{yahoo_symbol}",
            "Origin": "https://finance.yahoo.com",
        }

        for host in CHART_HOSTS:
            url = f"{host}/v8/finance/chart/{yahoo_symbol}"
            try:
                response = await self._client.get(
                    url, params=params, headers=headers, timeout=self._timeout
                )
                response.raise_for_status()
                series = parse_chart_response(response.json())
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("yahoo_fetch_failed", url=url, error=str(e))
                continue

            if series is not None:
                logger.debug(
                    "yahoo_history_fetched",
                    symbol=yahoo_symbol,
                    points=len(series),
                )
                return series

        return None
