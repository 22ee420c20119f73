"""Series reconciliation: align benchmarks and macro rates onto an asset's timeline.

Two passes:
1. align: walk the primary series once, skipping null prices, and feed
   every channel one tick per kept row.
2. rebase: pure post-processing that makes every benchmark and rate
   channel read exactly 0% on the first row.

Runs in O(n) over the primary series with dict lookups per channel.
"""

from dataclasses import replace
from decimal import Decimal

from tracker.exceptions import AssetNotFound
from tracker.history.channels import (
    HUNDRED,
    ONE,
    ZERO,
    AssetChannel,
    DailyRateChannel,
    IndexChannel,
    MonthlyRateChannel,
)
from tracker.history.dates import iso_instant
from tracker.logging import get_logger
from tracker.models import AlignedPoint, RateMap, RawSeries

logger = get_logger(__name__)

REBASED_FIELDS = ("ibov_pct", "ifix_pct", "cdi_pct", "ipca_pct")


def align_series(
    asset: RawSeries | None,
    ibov: RawSeries | None,
    ifix: RawSeries | None,
    cdi_rates: RateMap,
    ipca_rates: RateMap,
    *,
    fallback_cdi_daily: Decimal,
    fallback_ipca_monthly: Decimal,
) -> list[AlignedPoint]:
    """Reconcile the asset, two benchmark indices, and two rate series.

    Args:
        asset: Primary quote history. Required to contain a non-null price.
        ibov: Ibovespa history or None. Absent -> ibov_pct is 0 on every row.
        ifix: IFIX history or None. Absent -> ifix_pct is None on every row.
        cdi_rates: Daily CDI rates in percent, keyed by day.
        ipca_rates: Monthly IPCA rates in percent, keyed by first-of-month.
        fallback_cdi_daily: Daily percent applied on weekdays when cdi_rates
            is empty.
        fallback_ipca_monthly: Monthly percent used for months missing from
            ipca_rates.

    Returns:
        One AlignedPoint per non-null asset price, ascending by timestamp,
        re-based so benchmark and rate channels start at 0.

    Raises:
        AssetNotFound: If the asset series is None or has no valid price.
    """
    if asset is None or asset.first_valid_price() is None:
        raise AssetNotFound("Asset not found")

    asset_channel = AssetChannel(asset.first_valid_price())
    ibov_channel = IndexChannel(ibov, nullable=False)
    ifix_channel = IndexChannel(ifix, nullable=True)
    cdi_channel = DailyRateChannel(cdi_rates, fallback_cdi_daily)
    ipca_channel = MonthlyRateChannel(ipca_rates, fallback_ipca_monthly)

    if cdi_channel.using_fallback:
        logger.warning("cdi_fallback_rate_in_use", daily_pct=str(fallback_cdi_daily))
    if not ipca_rates:
        logger.warning("ipca_fallback_rate_in_use", monthly_pct=str(fallback_ipca_monthly))

    points: list[AlignedPoint] = []
    last_ts: int | None = None
    skipped_out_of_order = 0

    for i, ts in enumerate(asset.timestamps):
        price = asset.prices[i]
        if price is None:
            continue
        if last_ts is not None and ts <= last_ts:
            skipped_out_of_order += 1
            continue
        last_ts = ts

        points.append(
            AlignedPoint(
                date=iso_instant(ts),
                timestamp=ts * 1000,
                price=price,
                open=_ohlc_value(asset.opens, i, price),
                high=_ohlc_value(asset.highs, i, price),
                low=_ohlc_value(asset.lows, i, price),
                close=price,
                asset_pct=asset_channel.tick(price),
                ibov_pct=ibov_channel.tick(ts),
                ifix_pct=ifix_channel.tick(ts),
                cdi_pct=cdi_channel.tick(ts),
                ipca_pct=ipca_channel.tick(ts),
            )
        )

    if skipped_out_of_order:
        logger.debug("skipped_non_ascending_samples", count=skipped_out_of_order)

    logger.debug(
        "series_aligned",
        rows=len(points),
        ibov_absent=ibov_channel.absent,
        ifix_absent=ifix_channel.absent,
    )
    return rebase(points)


def rebase(points: list[AlignedPoint]) -> list[AlignedPoint]:
    """Re-base benchmark and rate channels to the first row.

    Each value v becomes ((1 + v/100) / (1 + base/100) - 1) * 100 where base
    is the channel's first-row value. None stays None. A baseline growth
    factor <= 0 cannot be divided through, so that channel is flattened to 0.
    """
    if not points:
        return []

    first = points[0]
    base_factors: dict[str, Decimal | None] = {}
    for name in REBASED_FIELDS:
        base = getattr(first, name)
        base_factors[name] = None if base is None else ONE + base / HUNDRED

    rebased = []
    for point in points:
        changes = {}
        for name, base_factor in base_factors.items():
            value = getattr(point, name)
            if value is None or base_factor is None:
                continue
            if base_factor <= 0:
                changes[name] = ZERO
            else:
                changes[name] = ((ONE + value / HUNDRED) / base_factor - ONE) * HUNDRED
        rebased.append(replace(point, **changes))
    return rebased


def _ohlc_value(
    values: tuple[Decimal | None, ...] | None,
    index: int,
    default: Decimal,
) -> Decimal:
    if values is None:
        return default
    value = values[index]
    return value if value is not None else default
