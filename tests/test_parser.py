"""Tests for the structured/text receipt parser."""

import json

import pytest

from splitbill.receipt.models import EntryType
from splitbill.receipt.parser import (
    ReceiptParser,
    StructuredPayload,
    UnstructuredText,
    decode_response,
    strip_code_fences,
)


@pytest.fixture
def parser():
    return ReceiptParser()


class TestDecodeResponse:
    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"entries": []}\n```') == '{"entries": []}'

    def test_object_payload(self):
        payload = decode_response(json.dumps({
            "entries": [{"name": "Soup", "price": 12.5, "type": "food"}],
            "hasSubtotal": True,
            "subtotal": 12.5,
            "total": 13.75,
        }))
        assert isinstance(payload, StructuredPayload)
        assert payload.has_subtotal is True
        assert payload.subtotal == 12.5
        assert payload.total == 13.75
        assert len(payload.entries) == 1

    def test_bare_array_payload(self):
        payload = decode_response('[{"name": "Tea", "price": 3, "type": "food"}]')
        assert isinstance(payload, StructuredPayload)
        assert payload.has_subtotal is False
        assert payload.subtotal is None
        assert payload.total is None

    def test_non_bool_has_subtotal_is_false(self):
        payload = decode_response('{"entries": [], "hasSubtotal": "yes"}')
        assert isinstance(payload, StructuredPayload)
        assert payload.has_subtotal is False

    def test_json_wrapped_in_prose(self):
        payload = decode_response(
            'Here you go: {"entries": [{"name": "Tea", "price": 3, "type": "food"}]} Enjoy!'
        )
        assert isinstance(payload, StructuredPayload)
        assert len(payload.entries) == 1

    @pytest.mark.parametrize("text", [
        '{"items": [\n{"name": "Soup", "price": 12500}\n]}',
        '{"entries": "Soup 12.500"}',
        '"Soup 12.500"',
    ])
    def test_other_json_shape_has_no_entries(self, text):
        payload = decode_response(text)
        assert isinstance(payload, StructuredPayload)
        assert payload.entries == []

    def test_plain_text_is_unstructured(self):
        payload = decode_response("Fried Rice 45.000,00")
        assert isinstance(payload, UnstructuredText)
        assert payload.text == "Fried Rice 45.000,00"


class TestStructuredParsing:
    def test_single_food_entry(self, parser):
        result = parser.parse('{"entries":[{"name":"Soup","price":12.5,"type":"food"}]}')
        assert len(result.entries) == 1
        assert len(result.food) == 1
        entry = result.food[0]
        assert entry.name == "Soup"
        assert entry.price == 12.50
        assert entry.type is EntryType.FOOD
        assert entry.id

    def test_markdown_fenced_json(self, parser):
        text = """```json
{"entries": [
  {"name": "Nasi Goreng", "price": 45000, "type": "food"},
  {"name": "PB1 10%", "price": 4500, "type": "fee"}
], "hasSubtotal": true, "subtotal": 45000, "total": 49500}
```"""
        result = parser.parse(text)
        assert [e.name for e in result.food] == ["Nasi Goreng"]
        assert [e.name for e in result.fees] == ["PB1 10%"]
        assert result.has_subtotal is True
        assert result.subtotal == 45000
        assert result.total == 49500

    def test_keeps_given_id_and_trims_name(self, parser):
        result = parser.parse('[{"id": "a1", "name": "  Tea  ", "price": 3, "type": "food"}]')
        assert result.entries[0].id == "a1"
        assert result.entries[0].name == "Tea"

    def test_rounds_half_away_from_zero(self, parser):
        result = parser.parse('[{"name": "Tea", "price": 2.675, "type": "food"},'
                              ' {"name": "Cake", "price": 1.005, "type": "food"}]')
        assert [e.price for e in result.entries] == [2.68, 1.01]

    def test_discount_fields(self, parser):
        result = parser.parse(json.dumps([{
            "name": "Pizza", "price": 80, "originalPrice": 100,
            "discount": 20, "type": "food",
        }]))
        entry = result.entries[0]
        assert entry.original_price == 100
        assert entry.discount == 20

    def test_non_numeric_discount_becomes_none(self, parser):
        result = parser.parse(json.dumps([{
            "name": "Pizza", "price": 80, "originalPrice": "100", "type": "food",
        }]))
        assert result.entries[0].original_price is None
        assert result.entries[0].discount is None

    @pytest.mark.parametrize("entry", [
        {"name": 42, "price": 10, "type": "food"},
        {"name": None, "price": 10, "type": "food"},
        {"name": "   ", "price": 10, "type": "food"},
        {"name": "Tea", "price": "10", "type": "food"},
        {"name": "Tea", "price": True, "type": "food"},
        {"name": "Tea", "price": None, "type": "food"},
        {"name": "Tea", "price": -1, "type": "food"},
        {"name": "Tea", "price": 10},
        {"name": "Tea", "price": 10, "type": "drink"},
        "Tea 10",
    ])
    def test_invalid_entries_dropped(self, parser, entry):
        result = parser.parse(json.dumps([entry, {"name": "Soup", "price": 5, "type": "food"}]))
        assert [e.name for e in result.entries] == ["Soup"]

    def test_huge_price_keeps_other_entries(self, parser):
        result = parser.parse('[{"name": "Soup", "price": 5, "type": "food"},'
                              ' {"name": "Glitch", "price": 1e30, "type": "food"}]')
        assert [(e.name, e.price) for e in result.entries] == [
            ("Soup", 5.0),
            ("Glitch", 1e30),
        ]

    def test_items_shape_gives_empty_result(self, parser):
        result = parser.parse('{"items": [\n{"name": "Soup", "price": 12500}\n]}')
        assert result.entries == []

    def test_generated_ids_are_deterministic(self, parser):
        text = '[{"name": "Tea", "price": 3, "type": "food"}, {"name": "Tea", "price": 3, "type": "food"}]'
        first = parser.parse(text)
        second = parser.parse(text)
        assert [e.id for e in first.entries] == [e.id for e in second.entries]
        # Same content at different positions still gets distinct ids
        assert first.entries[0].id != first.entries[1].id


class TestTextParsing:
    def test_regional_price_format(self, parser):
        result = parser.parse("Fried Rice 45.000,00")
        assert len(result.entries) == 1
        entry = result.entries[0]
        assert entry.name == "Fried Rice"
        assert entry.price == 45000.00
        assert entry.type is EntryType.FOOD
        assert result.has_subtotal is False

    def test_multiple_lines(self, parser):
        text = """Here are the items:
Nasi Goreng Rp 45.000
Es Teh 8.000

Ayam Bakar: 52.500,50
"""
        result = parser.parse(text)
        assert [(e.name, e.price) for e in result.entries] == [
            ("Nasi Goreng", 45000.0),
            ("Es Teh", 8000.0),
            ("Ayam Bakar", 52500.5),
        ]

    def test_price_is_last_number_on_line(self, parser):
        result = parser.parse("2 Fried Rice 90.000")
        assert result.entries[0].price == 90000.0
        assert result.entries[0].name == "2 Fried Rice"

    def test_quantity_marker_removed_from_name(self, parser):
        result = parser.parse("Fried Rice x2 90.000")
        assert result.entries[0].name == "Fried Rice"

    def test_summary_lines_skipped(self, parser):
        text = "Soto Ayam 30.000\nSubtotal 30.000\nTax 3.000\nTotal 33.000"
        result = parser.parse(text)
        assert [e.name for e in result.entries] == ["Soto Ayam"]

    def test_huge_text_price(self, parser):
        result = parser.parse("Soup 5.000\nGlitch 123456789012345678901234567890")
        assert [(e.name, e.price) for e in result.entries] == [
            ("Soup", 5000.0),
            ("Glitch", float("123456789012345678901234567890")),
        ]

    def test_name_starting_with_digit(self, parser):
        result = parser.parse("7Up 12.000")
        assert [(e.name, e.price) for e in result.entries] == [("7Up", 12000.0)]

    def test_payment_words_are_not_summary_lines(self, parser):
        result = parser.parse("Gift card 50.000\nService charge 5.000")
        assert [e.name for e in result.entries] == ["Gift card"]

    def test_zero_price_skipped(self, parser):
        assert parser.parse("Free refill 0").entries == []

    def test_other_separators(self):
        parser = ReceiptParser(thousands_separator=",", decimal_separator=".", skip_keywords=[])
        result = parser.parse("Burger 1,250.75")
        assert result.entries[0].name == "Burger"
        assert result.entries[0].price == 1250.75

    def test_parse_price(self, parser):
        assert parser.parse_price("45.000,00") == 45000.0
        assert parser.parse_price("1.234.567") == 1234567.0
        assert parser.parse_price("12,5") == 12.5

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "I could not read this receipt, sorry.",
        "{not json at all",
        "%%% ### @@@",
    ])
    def test_unreadable_input_gives_empty_result(self, parser, text):
        result = parser.parse(text)
        assert result.entries == []
        assert result.has_subtotal is False

    def test_non_string_input(self, parser):
        assert parser.parse(None).entries == []
