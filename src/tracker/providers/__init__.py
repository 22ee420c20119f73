"""Upstream data providers -- quote histories and macro rate series over HTTP."""

from tracker.providers.base import QuoteHistoryProvider, RateSeriesProvider
from tracker.providers.bcb import BcbRateProvider
from tracker.providers.fallback import FallbackQuoteProvider
from tracker.providers.http import create_http_client
from tracker.providers.investidor10 import Investidor10QuoteProvider
from tracker.providers.yahoo import YahooQuoteProvider

__all__ = [
    "BcbRateProvider",
    "FallbackQuoteProvider",
    "Investidor10QuoteProvider",
    "QuoteHistoryProvider",
    "RateSeriesProvider",
    "YahooQuoteProvider",
    "create_http_client",
]
