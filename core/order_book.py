"""
Order book aggregation and the "execute X% of available volume" calculator.
"""

from decimal import Decimal
from typing import Any, Iterable

from core.decimal_math import HUNDRED, ZERO, dsum, safe_divide, to_decimal
from core.models import AggregateResult, OrderRecord


def clamp_percent(value: Any) -> Decimal:
    """Clamp a user-entered percentage to [0, 100]. Non-numeric input is 0."""
    percent = to_decimal(value)
    if percent < 0:
        return ZERO
    if percent > HUNDRED:
        return HUNDRED
    return percent


def aggregate(orders: Iterable[OrderRecord], target_percent: Any) -> AggregateResult:
    """
    Compute totals for an order list and the cost of executing a share of it.

    The weighted-average price is volume weighted by ``remain``. Nothing is
    rounded here; an empty list (or one with no remaining volume) yields zeros.

    Args:
        orders: Order rows in the order the feed returned them.
        target_percent: Share of the total remaining volume to execute, 0-100.

    Returns:
        AggregateResult with exact Decimal fields.
    """
    orders = tuple(orders)

    total_remain = dsum(order.remain for order in orders)
    total_value = dsum(order.value for order in orders)
    price_volume = dsum(to_decimal(order.price) * to_decimal(order.remain) for order in orders)

    weighted_avg_price = safe_divide(price_volume, total_remain)
    target_remain = total_remain * (to_decimal(target_percent) / HUNDRED)
    total_payment = target_remain * weighted_avg_price

    return AggregateResult(
        weighted_avg_price=weighted_avg_price,
        total_remain=total_remain,
        total_value=total_value,
        target_remain=target_remain,
        total_payment=total_payment,
    )
