"""Final price summary for a list of line items."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .models import LineItem, round_price

if TYPE_CHECKING:
    from .vision import InterpreterBackend

logger = logging.getLogger(__name__)


@dataclass
class PriceSummary:
    calculation: str
    total: float
    item_count: int

    def to_dict(self) -> dict:
        return {
            "calculation": self.calculation,
            "total": self.total,
            "itemCount": self.item_count,
        }


def format_price(
    value: float, thousands_separator: str = ".", decimal_separator: str = ","
) -> str:
    """Format a price with regional separators (25000 -> ``25.000``).

    Cents are only shown when the price has them.
    """
    rounded = round_price(value)
    if rounded == int(rounded):
        text = f"{int(rounded):,}"
    else:
        text = f"{rounded:,.2f}"
    return (
        text.replace(",", "\0")
        .replace(".", decimal_separator)
        .replace("\0", thousands_separator)
    )


def _coerce_item(position: int, item: Any) -> tuple[str, float]:
    if isinstance(item, LineItem):
        return item.name, item.price
    if isinstance(item, dict):
        name, price = item.get("name"), item.get("price")
        if (
            isinstance(name, str)
            and isinstance(price, (int, float))
            and not isinstance(price, bool)
            and math.isfinite(price)
        ):
            return name, float(price)
    raise ValueError(f"Invalid item at position {position + 1}")


def build_listing(
    items: list[tuple[str, float]],
    currency: str = "Rp",
    thousands_separator: str = ".",
    decimal_separator: str = ",",
) -> str:
    return "\n".join(
        f"{n}. {name} - {currency} "
        f"{format_price(price, thousands_separator, decimal_separator)}"
        for n, (name, price) in enumerate(items, start=1)
    )


async def summarize_prices(
    items: Any,
    backend: InterpreterBackend | None = None,
    currency: str = "Rp",
    thousands_separator: str = ".",
    decimal_separator: str = ",",
) -> PriceSummary:
    """Total the items and describe their final prices.

    With a backend the description is written by the model; otherwise it
    is the plain listing followed by the total.

    Raises:
        ValueError: If no items are given or an item has no name or price.
        VisionError: If the model call fails.
    """
    if not items or not isinstance(items, list):
        raise ValueError("No items provided")

    pairs = [_coerce_item(i, item) for i, item in enumerate(items)]
    total = round_price(sum(price for _, price in pairs))
    listing = build_listing(pairs, currency, thousands_separator, decimal_separator)

    if backend is not None:
        calculation = await backend.explain_prices(listing, currency=currency)
    else:
        total_text = format_price(total, thousands_separator, decimal_separator)
        calculation = f"{listing}\n\nTotal: {currency} {total_text}"

    logger.info("Summarized %d item(s), total %.2f", len(pairs), total)
    return PriceSummary(calculation=calculation, total=total, item_count=len(pairs))
