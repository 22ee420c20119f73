"""Macro rate cache persistence layer.

Provides the SQLite database manager, the typed rate store, and the
read-through CachedRateProvider used in front of the SGS API.
"""

from tracker.data.cached_rates import CachedRateProvider
from tracker.data.database import RateCacheDatabase
from tracker.data.store import RateSeriesStore

__all__ = ["CachedRateProvider", "RateCacheDatabase", "RateSeriesStore"]
