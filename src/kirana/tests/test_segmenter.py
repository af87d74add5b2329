"""
Unit tests for kirana.extraction.segmenter.
"""
from decimal import Decimal

import pytest

from kirana.extraction.normalization import normalize
from kirana.extraction.segmenter import ItemSegmenter, looks_like_multiple_items, parse_multiple_items


def _summary(items):
    return [(item.product_name, item.quantity, item.unit) for item in items]


class TestParse:
    """Tests for ItemSegmenter.parse()."""

    def test_three_items_with_commas(self, segmenter):
        items = segmenter.parse("10 kg അരി, 2 kg പഞ്ചസാര, ഒരു സോപ്പ്")
        assert _summary(items) == [
            ("Rice", 10.0, "kg"),
            ("Sugar", 2.0, "kg"),
            ("Soap", 1.0, "piece"),
        ]
        assert [item.product_ml for item in items] == ["അരി", "പഞ്ചസാര", "സോപ്പ്"]

    def test_implicit_boundary_before_quantity(self, segmenter):
        """Test items are split where a new quantity starts without a separator."""
        items = segmenter.parse("10 kg അരി 10 kg ഗോതമ്പ്")
        assert _summary(items) == [("Rice", 10.0, "kg"), ("Wheat", 10.0, "kg")]

    def test_implicit_boundary_before_number_word(self, segmenter):
        items = segmenter.parse("ഒരു സോപ്പ് രണ്ട് കിലോ പഞ്ചസാര")
        assert _summary(items) == [("Soap", 1.0, "piece"), ("Sugar", 2.0, "kg")]

    def test_word_separator(self, segmenter):
        items = segmenter.parse("അരി ഉം പഞ്ചസാര")
        assert [item.product_name for item in items] == ["Rice", "Sugar"]

    def test_compound_fraction(self, segmenter):
        """Test "അരക്കിലോ" is half a kilo."""
        assert _summary(segmenter.parse("അരക്കിലോ പഞ്ചസാര")) == [("Sugar", 0.5, "kg")]

    def test_number_after_digit_stays_in_item(self, segmenter):
        """Test "2 അര കിലോ അരി" is one item of two."""
        assert _summary(segmenter.parse("2 അര കിലോ അരി")) == [("Rice", 2.0, "kg")]

    def test_product_unit_is_default(self, segmenter):
        """Test a product without a spoken unit takes its catalog unit."""
        assert _summary(segmenter.parse("അരി")) == [("Rice", 1.0, "kg")]

    def test_segments_without_products_dropped(self, segmenter):
        items = segmenter.parse("10 kg അരി, qqq")
        assert [item.product_name for item in items] == ["Rice"]

    def test_nothing_recognised(self, segmenter):
        assert segmenter.parse("qqq zzz") == []
        assert segmenter.parse("") == []
        assert segmenter.parse("   ") == []

    def test_prices_and_amounts(self, segmenter):
        items = segmenter.parse("10 kg അരി, 2 kg പഞ്ചസാര")
        assert items[0].unit_price == Decimal("55")
        assert items[0].amount == Decimal("550.00")
        assert items[1].amount == Decimal("90.00")

    def test_raw_text_is_the_segment(self, segmenter):
        items = segmenter.parse("10 kg അരി, 2 kg പഞ്ചസാര")
        assert [item.raw_text for item in items] == ["10 kg അരി", "2 kg പഞ്ചസാര"]

    @pytest.mark.parametrize("text,expected", [
        ("അരി നാല് കിലോ", [("Rice", 1.0, "kg")]),
        ("പഞ്ചസാര മുക്കാൽ കിലോ", [("Sugar", 1.0, "kg")]),
        ("10 kg അരി, 500 grams", [("Rice", 10.0, "kg")]),
    ])
    def test_quantity_only_segments_dropped(self, segmenter, text, expected):
        """Test a segment holding only a quantity never becomes a product."""
        assert _summary(segmenter.parse(text)) == expected

    def test_trailing_quantity_is_not_attached(self, segmenter):
        """Test "അരി രണ്ട് കിലോ" keeps the default quantity.

        The number word opens a new segment, which names no product and is
        dropped, so Rice is one kilo.
        """
        assert segmenter.split("അരി രണ്ട് കിലോ") == ["അരി", "രണ്ട് കിലോ"]
        assert _summary(segmenter.parse("അരി രണ്ട് കിലോ")) == [("Rice", 1.0, "kg")]

    def test_custom_catalog(self, small_catalog):
        segmenter = ItemSegmenter(catalog=small_catalog)
        items = segmenter.parse("2 kg rice and 1 kg sugar")
        assert _summary(items) == [("Rice", 2.0, "kg"), ("Sugar", 1.0, "kg")]


class TestReparse:
    """Tests that an item's own raw text parses back to the same item."""

    @pytest.mark.parametrize("text", [
        "10 kg അരി, 2 kg പഞ്ചസാര, ഒരു സോപ്പ്",
        "ഒരു സോപ്പ് രണ്ട് കിലോ പഞ്ചസാര",
        "അരക്കിലോ പഞ്ചസാര",
        "2 kg rice and 3 kg sugar",
    ])
    def test_normalized_raw_text(self, segmenter, text):
        items = segmenter.parse(text)
        assert items
        for item in items:
            reparsed = segmenter.parse(normalize(item.raw_text))
            assert [(i.product_name, i.quantity) for i in reparsed] == [
                (item.product_name, item.quantity)]

    def test_decimal_survives_raw_text_only(self, segmenter):
        """Test decimals re-parse from raw text; normalize() folds the point."""
        item = segmenter.parse("2.5 kg അരി")[0]
        assert (item.product_name, item.quantity) == ("Rice", 2.5)
        assert _summary(segmenter.parse(item.raw_text)) == [("Rice", 2.5, "kg")]
        assert normalize(item.raw_text) == "2 5 kg അരി"


class TestBoundaries:
    """Tests for implicit boundary insertion and multi-item detection."""

    def test_insert_boundaries(self, segmenter):
        assert segmenter.insert_boundaries("10 kg അരി 10 kg ഗോതമ്പ്") == "10 kg അരി, 10 kg ഗോതമ്പ്"

    def test_insert_boundary_before_number_word(self, segmenter):
        assert segmenter.insert_boundaries("ഒരു സോപ്പ് രണ്ട് കിലോ പഞ്ചസാര") == \
            "ഒരു സോപ്പ്, രണ്ട് കിലോ പഞ്ചസാര"

    def test_existing_comma_not_doubled(self, segmenter):
        text = "10 kg അരി, 2 kg പഞ്ചസാര"
        assert segmenter.insert_boundaries(text) == text

    def test_split(self, segmenter):
        assert segmenter.split("10 kg അരി, 2 kg പഞ്ചസാര") == ["10 kg അരി", "2 kg പഞ്ചസാര"]

    def test_looks_like_multiple_items(self, segmenter):
        assert segmenter.looks_like_multiple_items("10 kg അരി, 2 kg പഞ്ചസാര")
        assert segmenter.looks_like_multiple_items("10 kg അരി 10 kg ഗോതമ്പ്")
        assert not segmenter.looks_like_multiple_items("10 kg അരി")
        assert not segmenter.looks_like_multiple_items("")


class TestModuleShortcuts:
    def test_parse_multiple_items(self):
        assert [item.product_name for item in parse_multiple_items("അരി, സോപ്പ്")] == ["Rice", "Soap"]

    def test_looks_like_multiple_items(self):
        assert looks_like_multiple_items("അരി, സോപ്പ്")
