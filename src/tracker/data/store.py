"""Typed SQLite read/write abstraction for cached rate series.

CRITICAL: Rates are stored as TEXT in SQLite and restored as Decimal on read.
"""

import time
from decimal import Decimal

from tracker.data.database import RateCacheDatabase
from tracker.logging import get_logger
from tracker.models import RateMap

logger = get_logger(__name__)


class RateSeriesStore:
    """Async store for rate series entries and their fetched windows.

    All SQL access goes through self._database.db (the aiosqlite Connection).

    Usage:
        async with RateCacheDatabase("data/rates.db") as database:
            store = RateSeriesStore(database)
            await store.insert_rates(12, {"2024-01-02": Decimal("0.043739")})
    """

    def __init__(self, database: RateCacheDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def insert_rates(self, series_id: int, rates: RateMap) -> int:
        """Upsert rate entries for a series.

        SGS revises recent values, so existing rows are replaced.
        Returns the number of rows written.
        """
        if not rates:
            return 0

        data = [(series_id, key, str(rate)) for key, rate in rates.items()]
        await self._database.db.executemany(
            "INSERT OR REPLACE INTO rate_series (series_id, date_key, rate) "
            "VALUES (?, ?, ?)",
            data,
        )
        await self._database.db.commit()

        logger.debug("inserted_rates", series_id=series_id, total=len(data))
        return len(data)

    async def update_fetch_state(
        self,
        series_id: int,
        start_key: str,
        end_key: str,
    ) -> None:
        """Record the date window known to be fully cached for a series."""
        now_ms = int(time.time() * 1000)
        await self._database.db.execute(
            "INSERT OR REPLACE INTO fetch_state "
            "(series_id, start_key, end_key, last_fetched_at) "
            "VALUES (?, ?, ?, ?)",
            (series_id, start_key, end_key, now_ms),
        )
        await self._database.db.commit()

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_fetch_state(self, series_id: int) -> dict | None:
        """Get the cached window for a series.

        Returns dict with start_key, end_key, last_fetched_at or None.
        """
        cursor = await self._database.db.execute(
            "SELECT start_key, end_key, last_fetched_at "
            "FROM fetch_state WHERE series_id = ?",
            (series_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return {
            "start_key": row[0],
            "end_key": row[1],
            "last_fetched_at": row[2],
        }

    async def get_rates(
        self,
        series_id: int,
        start_key: str | None = None,
        end_key: str | None = None,
    ) -> RateMap:
        """Query cached rates for a series within an optional inclusive window.

        Date keys are ISO strings, so lexical order is chronological order.
        """
        conditions = ["series_id = ?"]
        params: list = [series_id]

        if start_key is not None:
            conditions.append("date_key >= ?")
            params.append(start_key)
        if end_key is not None:
            conditions.append("date_key <= ?")
            params.append(end_key)

        where = " AND ".join(conditions)
        cursor = await self._database.db.execute(
            f"SELECT date_key, rate FROM rate_series WHERE {where} ORDER BY date_key ASC",
            params,
        )
        rows = await cursor.fetchall()
        return {row[0]: Decimal(row[1]) for row in rows}

    async def get_cache_status(self) -> list[dict]:
        """Per-series entry counts and cached windows for the health endpoint."""
        cursor = await self._database.db.execute(
            "SELECT s.series_id, COUNT(r.date_key), s.start_key, s.end_key, s.last_fetched_at "
            "FROM fetch_state s LEFT JOIN rate_series r ON r.series_id = s.series_id "
            "GROUP BY s.series_id ORDER BY s.series_id"
        )
        rows = await cursor.fetchall()
        return [
            {
                "series_id": row[0],
                "entries": row[1],
                "start_key": row[2],
                "end_key": row[3],
                "last_fetched_at": row[4],
            }
            for row in rows
        ]
