"""Data models for receipt entries and normalized line items."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum


class EntryType(str, Enum):
    """Kind of a parsed receipt line."""

    FOOD = "food"
    FEE = "fee"


class InterpretationSource(str, Enum):
    """Which extraction path produced the model response."""

    OCR = "ocr"
    VISION = "vision"


def round_price(value: float) -> float:
    """Round to the cent, half away from zero (2.675 -> 2.68)."""
    if not math.isfinite(value):
        return value
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the two cents
        ctx.prec = max(ctx.prec, exact.adjusted() + 3)
        cents = exact.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(cents)


@dataclass
class RawEntry:
    """A single priced line produced by the parser."""

    id: str
    name: str
    price: float
    type: EntryType = EntryType.FOOD
    original_price: float | None = None
    discount: float | None = None


@dataclass
class ParseResult:
    """One receipt's interpretation.

    ``has_subtotal`` is true when fee entries are charged on top of a
    displayed subtotal and must be spread across the food entries.
    """

    entries: list[RawEntry] = field(default_factory=list)
    has_subtotal: bool = False
    subtotal: float | None = None
    total: float | None = None

    @property
    def food(self) -> list[RawEntry]:
        return [e for e in self.entries if e.type is EntryType.FOOD]

    @property
    def fees(self) -> list[RawEntry]:
        return [e for e in self.entries if e.type is EntryType.FEE]


@dataclass
class LineItem:
    """A shareable item handed to the bill-splitting UI."""

    id: str
    name: str
    price: float
    assigned_to: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "assignedTo": list(self.assigned_to),
        }


@dataclass
class Interpretation:
    """Model output together with the path that produced it."""

    source: InterpretationSource
    response: str


@dataclass
class ReceiptResponse:
    """Result of one pipeline invocation as returned to callers."""

    items: list[LineItem] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.ok else 500

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"error": self.error, "items": []}
        return {"items": [item.to_dict() for item in self.items]}
