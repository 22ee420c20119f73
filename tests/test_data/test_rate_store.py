"""Tests for RateCacheDatabase and RateSeriesStore (SQLite round trips)."""

from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio

from tracker.data.database import RateCacheDatabase
from tracker.data.store import RateSeriesStore


@pytest_asyncio.fixture
async def store(tmp_path) -> AsyncIterator[RateSeriesStore]:
    async with RateCacheDatabase(str(tmp_path / "cache" / "rates.db")) as database:
        yield RateSeriesStore(database)


class TestRateCacheDatabase:
    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path) -> None:
        path = tmp_path / "nested" / "dir" / "rates.db"
        async with RateCacheDatabase(str(path)):
            pass
        assert path.exists()

    @pytest.mark.asyncio
    async def test_schema_version_written_once(self, tmp_path) -> None:
        path = str(tmp_path / "rates.db")
        for _ in range(2):
            async with RateCacheDatabase(path) as database:
                cursor = await database.db.execute("SELECT COUNT(*) FROM schema_version")
                row = await cursor.fetchone()
        assert row[0] == 1

    def test_unconnected_access_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            RateCacheDatabase("unused.db").db


class TestRateSeriesStore:
    @pytest.mark.asyncio
    async def test_rates_round_trip_as_decimal(self, store: RateSeriesStore) -> None:
        written = await store.insert_rates(
            12,
            {"2024-01-02": Decimal("0.043739"), "2024-01-03": Decimal("0.043739")},
        )
        rates = await store.get_rates(12)

        assert written == 2
        assert rates == {
            "2024-01-02": Decimal("0.043739"),
            "2024-01-03": Decimal("0.043739"),
        }
        assert all(isinstance(v, Decimal) for v in rates.values())

    @pytest.mark.asyncio
    async def test_insert_replaces_revised_value(self, store: RateSeriesStore) -> None:
        await store.insert_rates(433, {"2024-01-01": Decimal("0.40")})
        await store.insert_rates(433, {"2024-01-01": Decimal("0.42")})
        assert await store.get_rates(433) == {"2024-01-01": Decimal("0.42")}

    @pytest.mark.asyncio
    async def test_insert_empty_is_noop(self, store: RateSeriesStore) -> None:
        assert await store.insert_rates(12, {}) == 0

    @pytest.mark.asyncio
    async def test_window_is_inclusive_and_per_series(self, store: RateSeriesStore) -> None:
        await store.insert_rates(
            12,
            {
                "2024-01-01": Decimal("1"),
                "2024-01-02": Decimal("2"),
                "2024-01-03": Decimal("3"),
            },
        )
        await store.insert_rates(433, {"2024-01-02": Decimal("9")})

        rates = await store.get_rates(12, "2024-01-02", "2024-01-03")
        assert list(rates) == ["2024-01-02", "2024-01-03"]

    @pytest.mark.asyncio
    async def test_fetch_state(self, store: RateSeriesStore) -> None:
        assert await store.get_fetch_state(12) is None

        await store.update_fetch_state(12, "2023-01-01", "2024-01-10")
        state = await store.get_fetch_state(12)

        assert state is not None
        assert state["start_key"] == "2023-01-01"
        assert state["end_key"] == "2024-01-10"
        assert state["last_fetched_at"] > 0

    @pytest.mark.asyncio
    async def test_cache_status(self, store: RateSeriesStore) -> None:
        await store.insert_rates(12, {"2024-01-02": Decimal("1"), "2024-01-03": Decimal("2")})
        await store.update_fetch_state(12, "2024-01-01", "2024-01-10")
        await store.update_fetch_state(433, "2023-01-01", "2024-01-10")

        status = await store.get_cache_status()

        assert [s["series_id"] for s in status] == [12, 433]
        assert status[0]["entries"] == 2
        assert status[1]["entries"] == 0
        assert status[0]["end_key"] == "2024-01-10"
