"""Shared test fixtures for the portfolio history tracker."""

import pytest

from tracker.config import AppSettings, BenchmarkSettings, RateCacheSettings


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (debug logging, no rate cache)."""
    return AppSettings(
        log_level="DEBUG",
        rate_cache=RateCacheSettings(enabled=False),
    )


@pytest.fixture
def benchmark_settings() -> BenchmarkSettings:
    """Default benchmark symbols, series codes, and fallback rates."""
    return BenchmarkSettings()
