"""Request identifier validation and range-to-upstream parameter mapping.

A range key selects three things: the Yahoo chart (range, interval) pair,
the number of days requested from Investidor10, and how far back the
macro rate window starts.
"""

import re
from datetime import date, timedelta

from tracker.exceptions import InvalidInput

TICKER_PATTERN = re.compile(r"^[A-Z0-9^]{3,12}(\.[A-Z]{2})?$")

DEFAULT_RANGE = "1Y"

# range key -> (yahoo range, yahoo interval)
YAHOO_PARAMS: dict[str, tuple[str, str]] = {
    # Intraday
    "1m": ("1d", "1m"),
    "5m": ("1d", "5m"),
    "10m": ("1d", "5m"),  # Yahoo has no 10m interval
    "15m": ("5d", "15m"),
    "30m": ("5d", "30m"),
    "1h": ("1mo", "60m"),
    # Candle interval
    "1d": ("1y", "1d"),
    "1wk": ("5y", "1wk"),
    "1mo": ("10y", "1mo"),
    "3mo": ("max", "3mo"),
    # Period
    "1D": ("1d", "5m"),
    "5D": ("5d", "15m"),
    "1M": ("1mo", "1d"),
    "6M": ("6mo", "1d"),
    "YTD": ("ytd", "1d"),
    "1Y": ("1y", "1d"),
    "2Y": ("2y", "1wk"),
    "5Y": ("5y", "1wk"),
    "10Y": ("10y", "1mo"),
    "MAX": ("max", "1mo"),
    # Portuguese aliases
    "1A": ("1y", "1d"),
    "5A": ("5y", "1wk"),
    "Tudo": ("max", "1mo"),
}

RANGE_ALIASES = {"1A": "1Y", "5A": "5Y", "Tudo": "MAX"}

INTRADAY_RANGES = frozenset({"1m", "5m", "10m", "15m", "30m", "1h", "1D", "5D"})

INVESTIDOR10_DAYS: dict[str, int] = {
    "1D": 1,
    "5D": 5,
    "1M": 30,
    "6M": 180,
    "YTD": 365,
    "1Y": 365,
    "2Y": 730,
    "5Y": 1825,
    "10Y": 3650,
    "MAX": 36500,
}


def validate_ticker(raw: str | None) -> str:
    """Normalize and validate a ticker (e.g. PETR4, HGLG11, ^BVSP, ITUB4.SA).

    Raises:
        InvalidInput: If the ticker is empty or malformed.
    """
    ticker = (raw or "").upper().strip()
    if not ticker:
        raise InvalidInput("Ticker required")
    if not TICKER_PATTERN.match(ticker):
        raise InvalidInput("Invalid ticker format")
    return ticker


def validate_range(raw: str | None) -> str:
    """Return a supported range key, defaulting to 1Y when omitted.

    Raises:
        InvalidInput: If the range key is not supported.
    """
    range_key = (raw or "").strip() or DEFAULT_RANGE
    if range_key not in YAHOO_PARAMS:
        raise InvalidInput("Invalid range")
    return range_key


def canonical_range(range_key: str) -> str:
    return RANGE_ALIASES.get(range_key, range_key)


def yahoo_params(range_key: str) -> tuple[str, str]:
    return YAHOO_PARAMS.get(range_key, YAHOO_PARAMS[DEFAULT_RANGE])


def investidor10_days(range_key: str) -> int:
    return INVESTIDOR10_DAYS.get(canonical_range(range_key).upper(), 365)


def is_intraday(range_key: str) -> bool:
    return canonical_range(range_key) in INTRADAY_RANGES


def to_yahoo_symbol(ticker: str) -> str:
    """Append the B3 suffix to Brazilian tickers.

    Brazilian stocks and funds end in a share-class digit (PETR4, HGLG11);
    US tickers are letters only. Index symbols (^) and already-suffixed
    symbols pass through.
    """
    if "^" in ticker or "." in ticker:
        return ticker
    if ticker[-1:].isdigit():
        return f"{ticker}.SA"
    return ticker


def rate_window_start(range_key: str, today: date) -> date:
    """First day of the macro rate fetch window for a range.

    The window opens a little before the quote window so the first asset
    row already has a daily rate to look up.
    """
    range_key = canonical_range(range_key)
    if range_key == "1D":
        return today
    if range_key == "5D":
        return today - timedelta(days=10)
    if range_key == "1M":
        return _shift_months(today, -2)
    if range_key == "6M":
        return _shift_months(today, -7)
    if range_key == "YTD":
        return date(today.year, 1, 1)
    if range_key == "1Y":
        return _shift_months(today, -13)
    if range_key == "2Y":
        return _shift_months(today, -24)
    if range_key == "5Y":
        return _shift_months(today, -60)
    if range_key == "10Y":
        return _shift_months(today, -120)
    if range_key == "MAX":
        return _shift_months(today, -180)
    return _shift_months(today, -12)


def _shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping to the target month's last day."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))
