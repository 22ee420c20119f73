"""Read-through SQLite cache in front of a rate series provider.

A series' fetch_state records one contiguous date window known to be
cached. A request is served from SQLite when that window covers it and
was refreshed within the TTL. Otherwise upstream is called and the
window is widened when it overlaps and is still fresh, and replaced
otherwise.
When upstream returns nothing, any cached rows in the window are served
as a stale fallback.
"""

import time
from datetime import date

import aiosqlite

from tracker.data.store import RateSeriesStore
from tracker.logging import get_logger
from tracker.models import RateMap
from tracker.providers.base import RateSeriesProvider

logger = get_logger(__name__)


class CachedRateProvider(RateSeriesProvider):
    """RateSeriesProvider decorator backed by RateSeriesStore.

    Args:
        upstream: The provider that actually fetches rates.
        store: SQLite rate store.
        ttl_seconds: Maximum age of a cached window before it is refreshed.
    """

    name = "cached"

    def __init__(
        self,
        upstream: RateSeriesProvider,
        store: RateSeriesStore,
        ttl_seconds: int,
    ) -> None:
        self._upstream = upstream
        self._store = store
        self._ttl_ms = ttl_seconds * 1000

    async def fetch_rate_series(self, series_id: int, start: date, end: date) -> RateMap:
        start_key, end_key = start.isoformat(), end.isoformat()

        state = None
        try:
            state = await self._store.get_fetch_state(series_id)
            if state is not None and self._is_fresh_cover(state, start_key, end_key):
                rates = await self._store.get_rates(series_id, start_key, end_key)
                logger.debug("rate_cache_hit", series_id=series_id, entries=len(rates))
                return rates
        except aiosqlite.Error as e:
            logger.warning("rate_cache_read_failed", series_id=series_id, error=str(e))

        rates = await self._upstream.fetch_rate_series(series_id, start, end)
        if rates:
            await self._save(series_id, rates, state, start_key, end_key)
            return rates

        try:
            stale = await self._store.get_rates(series_id, start_key, end_key)
        except aiosqlite.Error as e:
            logger.warning("rate_cache_read_failed", series_id=series_id, error=str(e))
            return {}
        if stale:
            logger.warning(
                "serving_stale_rates",
                series_id=series_id,
                entries=len(stale),
            )
        return stale

    def _is_fresh(self, state: dict) -> bool:
        now_ms = int(time.time() * 1000)
        return now_ms - state["last_fetched_at"] < self._ttl_ms

    def _is_fresh_cover(self, state: dict, start_key: str, end_key: str) -> bool:
        return (
            state["start_key"] <= start_key
            and state["end_key"] >= end_key
            and self._is_fresh(state)
        )

    async def _save(
        self,
        series_id: int,
        rates: RateMap,
        state: dict | None,
        start_key: str,
        end_key: str,
    ) -> None:
        # Only a still-fresh window may be widened; otherwise its older rows
        # would inherit the new fetch time.
        new_start, new_end = start_key, end_key
        if (
            state is not None
            and state["start_key"] <= end_key
            and start_key <= state["end_key"]
            and self._is_fresh(state)
        ):
            new_start = min(state["start_key"], start_key)
            new_end = max(state["end_key"], end_key)

        try:
            await self._store.insert_rates(series_id, rates)
            await self._store.update_fetch_state(series_id, new_start, new_end)
        except aiosqlite.Error as e:
            logger.warning("rate_cache_write_failed", series_id=series_id, error=str(e))
            return

        logger.info(
            "rate_cache_updated",
            series_id=series_id,
            entries=len(rates),
            window_start=new_start,
            window_end=new_end,
        )
