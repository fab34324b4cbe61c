"""Spread taxes and service fees over the food items of a receipt."""

from __future__ import annotations

import logging

from .models import LineItem, ParseResult, RawEntry, round_price

logger = logging.getLogger(__name__)


def fee_rates(fees: list[RawEntry], subtotal: float) -> list[float]:
    """Express each fee as a fraction of the food subtotal."""
    return [fee.price / subtotal for fee in fees]


def reconcile(
    food: list[RawEntry], fees: list[RawEntry], has_subtotal: bool
) -> list[LineItem]:
    """Build line items, distributing fees proportionally when they are additive.

    Fees are only applied when the receipt prints a subtotal they are added
    on top of. Without one, item prices are taken to already include them.
    Rates stack multiplicatively: fees of 10% and 5% turn 100 into
    100 * 1.10 * 1.05 = 115.50. Prices are rounded after each fee.
    """
    subtotal = sum(entry.price for entry in food)
    prices = [entry.price for entry in food]

    if has_subtotal and subtotal > 0 and fees:
        rates = fee_rates(fees, subtotal)
        for fee, rate in zip(fees, rates):
            logger.debug("Applying fee %r at rate %.4f", fee.name, rate)
            prices = [round_price(price * (1 + rate)) for price in prices]
    elif fees:
        logger.debug(
            "Leaving %d fee(s) undistributed (hasSubtotal=%s, subtotal=%.2f)",
            len(fees), has_subtotal, subtotal,
        )

    return [
        LineItem(id=entry.id, name=entry.name, price=price, assigned_to=[])
        for entry, price in zip(food, prices)
    ]


def reconcile_result(result: ParseResult) -> list[LineItem]:
    return reconcile(result.food, result.fees, result.has_subtotal)
