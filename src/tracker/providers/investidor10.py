"""Investidor10 chart API quote provider for B3 stocks and real-estate funds.

Stocks are served by ticker directly. Funds (FIIs) are addressed by a
numeric id that only appears in the fund's HTML page, so the page is
fetched first and the id extracted from its inline script.

Only close prices are published; open/high/low are left to default to
the close when aligned.
"""

import re

import httpx

from tracker.config import HttpSettings
from tracker.history.dates import key_to_timestamp, parse_br_date
from tracker.history.ranges import investidor10_days
from tracker.logging import get_logger
from tracker.models import RawSeries, to_decimal
from tracker.providers.base import QuoteHistoryProvider

logger = get_logger(__name__)

BASE_URL = "https://investidor10.com.br"
FII_ID_PATTERN = re.compile(r"id:\s*(\d+)")


def parse_chart_points(items: list[dict]) -> RawSeries | None:
    """Build a RawSeries from the chart payload's "real" list.

    Items look like {"created_at": "DD/MM/YYYY[ HH:mm]", "price": 12.34}.
    Each sample is stamped at UTC midnight of its day. Malformed items are
    skipped.
    """
    points = []
    for item in items:
        try:
            key = parse_br_date(str(item["created_at"]))
        except (KeyError, TypeError, ValueError):
            logger.debug("investidor10_item_skipped", item=item)
            continue
        points.append((key_to_timestamp(key), to_decimal(item.get("price"))))

    if not points:
        return None
    return RawSeries.from_points(points)


class Investidor10QuoteProvider(QuoteHistoryProvider):
    """Quote history from Investidor10 (daily closes only).

    Args:
        client: Shared httpx AsyncClient.
        settings: HTTP settings (timeout per request).
    """

    name = "investidor10"

    def __init__(self, client: httpx.AsyncClient, settings: HttpSettings) -> None:
        self._client = client
        self._timeout = settings.investidor10_timeout

    async def fetch_quote_history(self, symbol: str, range_key: str) -> RawSeries | None:
        ticker = symbol.upper().replace(".SA", "")
        days = investidor10_days(range_key)

        series = await self._fetch_stock(ticker, days)
        if series is None:
            series = await self._fetch_fii(ticker, days)
        if series is not None:
            logger.debug("investidor10_history_fetched", ticker=ticker, points=len(series))
        return series

    async def _fetch_stock(self, ticker: str, days: int) -> RawSeries | None:
        url = f"{BASE_URL}/api/cotacoes/acao/chart/{ticker}/{days}"
        try:
            data = await self._get_json(url)
        except (httpx.HTTPError, ValueError) as e:
            # Not a stock, or the endpoint is down: the FII route is next
            logger.debug("investidor10_stock_chart_unavailable", ticker=ticker, error=str(e))
            return None
        return self._parse(data)

    async def _fetch_fii(self, ticker: str, days: int) -> RawSeries | None:
        page_url = f"{BASE_URL}/fiis/{ticker}/"
        try:
            response = await self._client.get(page_url, timeout=self._timeout)
            response.raise_for_status()
            match = FII_ID_PATTERN.search(response.text)
            if match is None:
                logger.debug("investidor10_fii_id_not_found", ticker=ticker)
                return None

            chart_url = f"{BASE_URL}/api/fii/cotacoes/chart/{match.group(1)}/{days}"
            data = await self._get_json(chart_url, headers={"Referer": page_url})
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("investidor10_fetch_failed", ticker=ticker, error=str(e))
            return None
        return self._parse(data)

    async def _get_json(self, url: str, headers: dict | None = None) -> dict:
        response = await self._client.get(url, headers=headers, timeout=self._timeout)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _parse(data: object) -> RawSeries | None:
        items = data.get("real") if isinstance(data, dict) else None
        if not items:
            return None
        return parse_chart_points(items)
