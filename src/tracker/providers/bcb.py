"""Brazilian Central Bank SGS time-series API rate provider.

Series used by the tracker: 12 (CDI, daily percent) and 433 (IPCA,
monthly percent, dated on the first of the month).
"""

from datetime import date

import httpx

from tracker.config import HttpSettings
from tracker.history.dates import format_br_date, parse_br_date
from tracker.logging import get_logger
from tracker.models import RateMap, to_decimal
from tracker.providers.base import RateSeriesProvider

logger = get_logger(__name__)

SGS_URL = "https://api.bcb.gov.br/dados/serie/bcdata.sgs.{series_id}/dados"


def parse_sgs_response(data: object) -> RateMap:
    """Convert SGS items [{"data": "DD/MM/YYYY", "valor": "0.04"}] to a RateMap.

    Malformed items are skipped; a non-list payload yields an empty map.
    """
    rates: RateMap = {}
    if not isinstance(data, list):
        return rates

    skipped = 0
    for item in data:
        try:
            key = parse_br_date(str(item["data"]))
        except (KeyError, TypeError, ValueError):
            skipped += 1
            continue
        rate = to_decimal(item.get("valor"))
        if rate is None:
            skipped += 1
            continue
        rates[key] = rate

    if skipped:
        logger.debug("sgs_items_skipped", count=skipped)
    return rates


class BcbRateProvider(RateSeriesProvider):
    """Rate series from the SGS JSON API.

    Args:
        client: Shared httpx AsyncClient.
        settings: HTTP settings (timeout per request).
    """

    name = "bcb"

    def __init__(self, client: httpx.AsyncClient, settings: HttpSettings) -> None:
        self._client = client
        self._timeout = settings.bcb_timeout

    async def fetch_rate_series(self, series_id: int, start: date, end: date) -> RateMap:
        params = {
            "formato": "json",
            "dataInicial": format_br_date(start),
            "dataFinal": format_br_date(end),
        }
        try:
            response = await self._client.get(
                SGS_URL.format(series_id=series_id),
                params=params,
                timeout=self._timeout,
            )
            response.raise_for_status()
            rates = parse_sgs_response(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("bcb_series_fetch_failed", series_id=series_id, error=str(e))
            return {}

        logger.debug("bcb_series_fetched", series_id=series_id, entries=len(rates))
        return rates
