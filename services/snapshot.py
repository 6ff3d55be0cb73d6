"""
Snapshot Computation

Turns one PricePoint and one USD/RUB rate into the RUB figures shown in the
table, plus the change of the total value since the previous cycle.
"""

from datetime import datetime
from typing import Optional

from core.schemas import ChangeSign, PricePoint, Snapshot
from core.utils.time import current_utc_datetime


def change_sign_of(change: float) -> ChangeSign:
    if change > 0:
        return "positive"
    if change < 0:
        return "negative"
    return "zero"


def compute_snapshot(
    price_point: PricePoint,
    rate: float,
    previous_total: Optional[float] = None,
    computed_at: Optional[datetime] = None,
) -> Snapshot:
    """
    Compute the derived RUB values for one cycle.

    Args:
        price_point: BTC price in USD and volume in BTC
        rate: RUB per one USD
        previous_total: total_value_local of the previous cycle, None on the first one
        computed_at: Timestamp to record (defaults to now, UTC)

    Returns:
        Snapshot. The caller keeps its total_value_local as the next previous_total.

    Example:
        >>> point = PricePoint(price_usd=50000, volume_units=1)
        >>> snap = compute_snapshot(point, 90, previous_total=4_000_000)
        >>> snap.total_value_local, snap.change_local, snap.change_sign
        (4500000.0, 500000.0, 'positive')
    """
    market_price_local = price_point.price_usd * rate
    total_value_local = market_price_local * price_point.volume_units
    change_local = 0.0 if previous_total is None else total_value_local - previous_total

    return Snapshot(
        market_price_local=market_price_local,
        total_value_local=total_value_local,
        change_local=change_local,
        change_sign=change_sign_of(change_local),
        price_usd=price_point.price_usd,
        volume_units=price_point.volume_units,
        rate=rate,
        computed_at=computed_at or current_utc_datetime(),
    )
