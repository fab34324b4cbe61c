"""Turn model answers into typed receipt entries.

A model answer is first decoded into one of two variants:

- ``StructuredPayload``: JSON in the receipt shape, either an object with an
  ``entries`` list or a bare list of entries.
- ``UnstructuredText``: anything that is not JSON. It is read line by line,
  looking for prices in the regional format (``45.000,00`` by default).

JSON of any other shape holds no entries.

Both variants go through the same sanitizing step, so an entry with a blank
name or a non-numeric price is dropped whichever way it came in. Parsing
never raises; unreadable input gives an empty result.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .config import DEFAULT_SKIP_KEYWORDS
from .models import EntryType, ParseResult, RawEntry, round_price

if TYPE_CHECKING:
    from .config import ReceiptConfig

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```[A-Za-z]*\n?")

# Trailing tokens that sit between an item name and its price
_NAME_NOISE_WORDS = {"rp", "idr", "usd", "eur", "x", "qty", "@"}


@dataclass
class StructuredPayload:
    """Model answer that decoded as JSON in the receipt shape."""

    entries: list[Any] = field(default_factory=list)
    has_subtotal: bool = False
    subtotal: float | None = None
    total: float | None = None


@dataclass
class UnstructuredText:
    """Model answer that has to be read as plain text."""

    text: str


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers such as ```json and ```."""
    return _FENCE.sub("", text).strip()


def decode_response(text: str) -> StructuredPayload | UnstructuredText:
    """Decode a model answer into a structured or unstructured variant."""
    cleaned = strip_code_fences(text)
    data = _load_json(cleaned)

    if isinstance(data, list):
        return StructuredPayload(entries=data)
    if isinstance(data, dict) and isinstance(data.get("entries"), list):
        return StructuredPayload(
            entries=data["entries"],
            has_subtotal=data.get("hasSubtotal") is True,
            subtotal=_number_or_none(data.get("subtotal")),
            total=_number_or_none(data.get("total")),
        )
    if data is not None:
        # JSON, but not in the receipt shape: nothing to read
        return StructuredPayload()
    return UnstructuredText(cleaned)


def _load_json(text: str) -> Any:
    """Load the answer as JSON, or the JSON span inside it; None if neither."""
    try:
        return json.loads(text)
    except ValueError:
        pass

    # Models sometimes wrap the JSON in a sentence
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = text.find(opener), text.rfind(closer)
        if 0 <= start < end:
            try:
                data = json.loads(text[start:end + 1])
            except ValueError:
                continue
            # A bracketed "[1]" inside prose is not an entry list
            if isinstance(data, dict) or (
                isinstance(data, list) and data and all(isinstance(d, dict) for d in data)
            ):
                return data
    return None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _number_or_none(value: Any) -> float | None:
    return round_price(value) if _is_number(value) else None


def _entry_id(position: int, name: str, price: float) -> str:
    digest = hashlib.sha1(f"{position}|{name}|{price:.2f}".encode()).hexdigest()
    return f"item_{digest[:10]}"


class ReceiptParser:
    """Parses model answers into a ``ParseResult``."""

    def __init__(
        self,
        thousands_separator: str = ".",
        decimal_separator: str = ",",
        skip_keywords: list[str] | None = None,
    ) -> None:
        self._thousands = thousands_separator
        self._decimal = decimal_separator

        t = re.escape(thousands_separator)
        d = re.escape(decimal_separator)
        self._price_pattern = re.compile(
            rf"(?<![\d{t}{d}])(?:\d{{1,3}}(?:{t}\d{{3}})+|\d+)(?:{d}\d+)?"
        )

        keywords = DEFAULT_SKIP_KEYWORDS if skip_keywords is None else skip_keywords
        if keywords:
            alternatives = "|".join(re.escape(k.lower()) for k in keywords)
            self._skip_pattern: re.Pattern | None = re.compile(
                rf"\b(?:{alternatives})\b"
            )
        else:
            self._skip_pattern = None

    @classmethod
    def from_config(cls, config: ReceiptConfig) -> ReceiptParser:
        return cls(
            thousands_separator=config.parser.thousands_separator,
            decimal_separator=config.parser.decimal_separator,
            skip_keywords=config.parser.skip_keywords,
        )

    def parse(self, response: str) -> ParseResult:
        if not isinstance(response, str) or not response.strip():
            return ParseResult()

        payload = decode_response(response)
        match payload:
            case StructuredPayload():
                raw_entries = payload.entries
                has_subtotal = payload.has_subtotal
                subtotal, total = payload.subtotal, payload.total
            case UnstructuredText():
                logger.warning(
                    "Model answer is not receipt JSON; reading it as plain text"
                )
                raw_entries = self.parse_text(payload.text)
                has_subtotal = False
                subtotal = total = None

        entries = self.sanitize(raw_entries)
        logger.debug(
            "Parsed %d of %d entries (hasSubtotal=%s)",
            len(entries), len(raw_entries), has_subtotal,
        )
        return ParseResult(
            entries=entries,
            has_subtotal=has_subtotal,
            subtotal=subtotal,
            total=total,
        )

    def parse_price(self, text: str) -> float | None:
        """Convert a regional price like ``45.000,00`` to ``45000.0``."""
        normalized = text.replace(self._thousands, "").replace(self._decimal, ".")
        try:
            value = float(normalized)
        except ValueError:
            return None
        return value if math.isfinite(value) else None

    def parse_text(self, text: str) -> list[dict]:
        """Read ``<name> <price>`` lines out of free text.

        Every entry found this way is a food entry.
        """
        found: list[dict] = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue

            matches = list(self._price_pattern.finditer(line))
            if not matches:
                continue
            # Prices are right-aligned on receipts
            price_match = matches[-1]
            price = self.parse_price(price_match.group())
            if price is None or price <= 0:
                continue

            name = self._line_name(line, price_match)
            if not name or self._is_summary_line(name):
                continue

            found.append({"name": name, "price": price, "type": EntryType.FOOD.value})
        return found

    def sanitize(self, raw_entries: list[Any]) -> list[RawEntry]:
        """Validate raw entries, assign ids and round prices.

        Entries without a usable name, price or type are dropped.
        """
        entries: list[RawEntry] = []
        for position, raw in enumerate(raw_entries):
            if not isinstance(raw, dict):
                continue

            name = raw.get("name")
            price = raw.get("price")
            if not isinstance(name, str) or not name.strip():
                continue
            if not _is_number(price) or price < 0:
                continue

            raw_type = raw.get("type")
            if not isinstance(raw_type, str):
                continue
            try:
                entry_type = EntryType(raw_type.strip().lower())
            except ValueError:
                continue

            name = name.strip()
            price = round_price(price)
            raw_id = raw.get("id")
            if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool) and str(raw_id).strip():
                entry_id = str(raw_id).strip()
            else:
                entry_id = _entry_id(position, name, price)

            entries.append(
                RawEntry(
                    id=entry_id,
                    name=name,
                    price=price,
                    type=entry_type,
                    original_price=_number_or_none(raw.get("originalPrice")),
                    discount=_number_or_none(raw.get("discount")),
                )
            )
        return entries

    def _line_name(self, line: str, price_match: re.Match) -> str:
        first_digit = re.search(r"\d", line)
        name = _clean_name(line[:first_digit.start()]) if first_digit else ""
        if name:
            return name
        # No clean split: drop the price text and keep the rest
        return _clean_name(line[:price_match.start()] + line[price_match.end():])

    def _is_summary_line(self, name: str) -> bool:
        return bool(self._skip_pattern and self._skip_pattern.search(name.lower()))


def _clean_name(text: str) -> str:
    words = text.split()
    while words and (
        words[-1].lower().rstrip(".:") in _NAME_NOISE_WORDS
        or not any(c.isalnum() for c in words[-1])
    ):
        words.pop()
    return " ".join(words).strip(" :-=*@")
