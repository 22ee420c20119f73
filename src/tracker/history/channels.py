"""Per-channel accumulators fed one primary-timeline tick at a time.

Each channel owns its own state (start price, last emitted value, or a
compounding accumulator) and produces one output field per kept row of
the primary series. The engine never shares state between channels.
"""

from decimal import Decimal

from tracker.history.dates import date_key, is_weekday, month_key, previous_day_key
from tracker.models import RateMap, RawSeries

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Average trading days per month, used to spread a monthly rate into a
# per-row factor.
TRADING_DAYS_PER_MONTH = 21


def pct_change(price: Decimal, start: Decimal) -> Decimal:
    """Percent change of price against start. Caller guarantees start > 0."""
    return (price - start) / start * HUNDRED


def monthly_to_daily_factor(monthly_rate_pct: Decimal) -> Decimal:
    """Per-day growth factor equivalent to a monthly percent rate.

    (1 + r/100) ** (1/21), compounded over 21 trading days. A rate at or
    below -100% has no real root and yields a zero factor.
    """
    base = ONE + monthly_rate_pct / HUNDRED
    if base <= 0:
        return ZERO
    return base ** (ONE / Decimal(TRADING_DAYS_PER_MONTH))


class AssetChannel:
    """Primary asset: percent change against its first non-null price."""

    def __init__(self, start_price: Decimal | None) -> None:
        self._start = start_price

    def tick(self, price: Decimal) -> Decimal:
        if self._start is None or self._start <= 0:
            return ZERO
        return pct_change(price, self._start)


class IndexChannel:
    """Benchmark index aligned by calendar day with flat carry-forward.

    Args:
        series: The benchmark quote history, or None if it could not be fetched.
        nullable: Report None (instead of 0) on every row when the series is
            absent entirely, so "unavailable" reads differently from "flat".
    """

    def __init__(self, series: RawSeries | None, nullable: bool = False) -> None:
        self._prices: dict[str, Decimal] = series.price_by_day() if series else {}
        self._start = series.first_valid_price() if series else None
        self._nullable = nullable
        self._last_pct = ZERO

    @property
    def absent(self) -> bool:
        return self._start is None

    def tick(self, ts_seconds: int) -> Decimal | None:
        if self._start is None:
            return None if self._nullable else ZERO
        if self._start <= 0:
            return ZERO

        price = self._prices.get(date_key(ts_seconds))
        if price is not None:
            self._last_pct = pct_change(price, self._start)
        # Missing day: carry the last emitted value (0 before any sample)
        return self._last_pct


class DailyRateChannel:
    """Compounds a daily percent-rate series (CDI) onto the primary timeline.

    Lookup order per row: exact day, then the previous calendar day, to
    absorb the gap between the rate publication calendar and the trading
    calendar. The fallback rate is used only when the rate map is empty as
    a whole, and then only on weekdays. A map that merely lacks a given day
    accrues nothing for it.
    """

    def __init__(self, rates: RateMap, fallback_daily_pct: Decimal) -> None:
        self._rates = rates
        self._fallback_factor = ONE + fallback_daily_pct / HUNDRED
        self._use_fallback = not rates
        self._acc = ONE

    @property
    def using_fallback(self) -> bool:
        return self._use_fallback

    def lookup(self, ts_seconds: int) -> Decimal | None:
        rate = self._rates.get(date_key(ts_seconds))
        if rate is None:
            rate = self._rates.get(previous_day_key(ts_seconds))
        return rate

    def tick(self, ts_seconds: int) -> Decimal:
        rate = self.lookup(ts_seconds)
        if rate is not None:
            self._acc *= ONE + rate / HUNDRED
        elif self._use_fallback and is_weekday(ts_seconds):
            self._acc *= self._fallback_factor
        return (self._acc - ONE) * HUNDRED


class MonthlyRateChannel:
    """Compounds a monthly percent-rate series (IPCA) onto the primary timeline.

    The month's rate (or the fallback rate when that month is missing) is
    spread into a per-row factor and applied on every row, weekends
    included. There is no previous-period lookup.
    """

    def __init__(self, rates: RateMap, fallback_monthly_pct: Decimal) -> None:
        self._rates = rates
        self._fallback_factor = monthly_to_daily_factor(fallback_monthly_pct)
        self._factors: dict[str, Decimal] = {}
        self._acc = ONE

    def factor_for(self, ts_seconds: int) -> Decimal:
        key = month_key(ts_seconds)
        factor = self._factors.get(key)
        if factor is None:
            rate = self._rates.get(key)
            factor = (
                monthly_to_daily_factor(rate) if rate is not None else self._fallback_factor
            )
            self._factors[key] = factor
        return factor

    def tick(self, ts_seconds: int) -> Decimal:
        self._acc *= self.factor_for(ts_seconds)
        return (self._acc - ONE) * HUNDRED
