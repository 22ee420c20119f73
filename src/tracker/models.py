"""Shared data models for quote series, rate maps, and aligned output.

All prices, rates, and percentages use Decimal. Floats only appear at the
HTTP boundary, where the chart client expects JSON numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from tracker.history.dates import date_key

# Date key (YYYY-MM-DD) -> rate in percent. Daily series use the exact
# day; monthly series use the first day of the month.
RateMap = dict[str, Decimal]


@dataclass(frozen=True)
class RawSeries:
    """One asset or index quote history as parallel sequences.

    timestamps are Unix seconds in ascending order. prices may contain None
    for non-trading gaps. opens/highs/lows are optional; a missing array or
    element falls back to the close price when aligned.
    """

    timestamps: tuple[int, ...]
    prices: tuple[Decimal | None, ...]
    opens: tuple[Decimal | None, ...] | None = None
    highs: tuple[Decimal | None, ...] | None = None
    lows: tuple[Decimal | None, ...] | None = None

    def __post_init__(self) -> None:
        n = len(self.timestamps)
        if len(self.prices) != n:
            raise ValueError(
                f"prices length {len(self.prices)} != timestamps length {n}"
            )
        for name in ("opens", "highs", "lows"):
            values = getattr(self, name)
            if values is not None and len(values) != n:
                raise ValueError(f"{name} length {len(values)} != timestamps length {n}")

    @classmethod
    def from_points(
        cls,
        points: list[tuple[int, Decimal | None]],
    ) -> RawSeries:
        """Build a close-only series from (timestamp, price) pairs.

        Sorts by timestamp; for duplicate timestamps the last pair wins.
        """
        by_ts: dict[int, Decimal | None] = {}
        for ts, price in points:
            by_ts[ts] = price
        ordered = sorted(by_ts.items())
        return cls(
            timestamps=tuple(ts for ts, _ in ordered),
            prices=tuple(price for _, price in ordered),
        )

    def __len__(self) -> int:
        return len(self.timestamps)

    def first_valid_price(self) -> Decimal | None:
        """First non-null price in chronological order, or None."""
        for price in self.prices:
            if price is not None:
                return price
        return None

    def valid_count(self) -> int:
        return sum(1 for price in self.prices if price is not None)

    def price_by_day(self) -> dict[str, Decimal]:
        """Map UTC date key -> price for non-null samples.

        Intraday series have several samples per day; the latest one wins.
        """
        return {
            date_key(ts): price
            for ts, price in zip(self.timestamps, self.prices)
            if price is not None
        }


@dataclass(frozen=True)
class AlignedPoint:
    """One output row on the primary asset's timeline.

    asset/ibov/ifix percentages are change since each series' start price;
    cdi/ipca are cumulative accrual re-based to the first row. ifix_pct is
    None on every row when the IFIX series was unavailable.
    """

    date: str
    timestamp: int  # milliseconds
    price: Decimal
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    asset_pct: Decimal
    ibov_pct: Decimal | None
    ifix_pct: Decimal | None
    cdi_pct: Decimal
    ipca_pct: Decimal

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys the chart client expects."""
        return {
            "date": self.date,
            "timestamp": self.timestamp,
            "price": _to_number(self.price),
            "open": _to_number(self.open),
            "high": _to_number(self.high),
            "low": _to_number(self.low),
            "close": _to_number(self.close),
            "assetPct": _to_number(self.asset_pct),
            "ibovPct": _to_number(self.ibov_pct),
            "ifixPct": _to_number(self.ifix_pct),
            "cdiPct": _to_number(self.cdi_pct),
            "ipcaPct": _to_number(self.ipca_pct),
        }


@dataclass(frozen=True)
class HistoryResult:
    """Aligned series plus the requested identifiers echoed back."""

    ticker: str
    range: str
    points: list[AlignedPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ticker": self.ticker,
            "range": self.range,
            "points": [point.to_dict() for point in self.points],
        }


def to_decimal(value: object) -> Decimal | None:
    """Convert an upstream JSON number or numeric string to Decimal.

    None, booleans, unparseable strings, NaN, and infinities become None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _to_number(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None
