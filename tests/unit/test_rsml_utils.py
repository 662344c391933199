"""Unit tests for shared element helpers (io/rsml_utils.py)."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from pyrsml.io.rsml_utils import (
    first_child_text,
    get_attribute,
    local_name,
    parse_csv_floats,
    parse_float_or_none,
    text_content,
)


# =============================================================================
# Test LocalName
# =============================================================================


class TestLocalName:
    """Tests for local_name."""

    def test_plain(self) -> None:
        """Test a tag without namespace."""
        assert local_name("root") == "root"

    def test_namespaced(self) -> None:
        """Test namespaced."""
        assert local_name("{http://example.org/po}accession") == "accession"


# =============================================================================
# Test TextContent
# =============================================================================


class TestTextContent:
    """Tests for text_content."""

    def test_nested(self) -> None:
        """Test text of nested elements."""
        element = ET.fromstring("<a>x<b>y</b>z</a>")
        assert text_content(element) == "xyz"

    def test_empty(self) -> None:
        """Test an empty element."""
        assert text_content(ET.fromstring("<a/>")) == ""


# =============================================================================
# Test FirstChildText
# =============================================================================


class TestFirstChildText:
    """Tests for first_child_text."""

    def test_direct_child_only(self) -> None:
        """Test direct child only."""
        element = ET.fromstring("<m><image><unit>px</unit></image><unit>cm</unit></m>")
        assert first_child_text(element, "unit") == "cm"

    def test_missing(self) -> None:
        """Test missing."""
        assert first_child_text(ET.fromstring("<m/>"), "unit") is None


# =============================================================================
# Test ParseFloat
# =============================================================================


class TestParseFloat:
    """Tests for parse_float_or_none and parse_csv_floats."""

    @pytest.mark.parametrize(
        "value,expected", [("1.5", 1.5), (" -2 ", -2.0), ("1e3", 1000.0), ("0", 0.0)]
    )
    def test_numbers(self, value: str, expected: float) -> None:
        """Test valid numbers."""
        assert parse_float_or_none(value) == expected

    @pytest.mark.parametrize("value", [None, "", "a", "1,5"])
    def test_not_numbers(self, value: str | None) -> None:
        """Test not numbers."""
        assert parse_float_or_none(value) is None

    @pytest.mark.parametrize("value", ["nan", "NaN", "inf", "-Infinity", "1e999"])
    def test_non_finite(self, value: str) -> None:
        """Test non finite."""
        assert parse_float_or_none(value) is None

    @pytest.mark.parametrize("value", ["1_0", "1_000.5"])
    def test_digit_separators(self, value: str) -> None:
        """Test digit separators."""
        assert parse_float_or_none(value) is None

    def test_csv_rejects_non_finite(self) -> None:
        """Test csv rejects non finite."""
        assert parse_csv_floats("1, nan, 2_0, 3") == ([1.0, 3.0], ["nan", "2_0"])

    def test_csv(self) -> None:
        """Test parsing comma-separated values."""
        assert parse_csv_floats("2.5, 1.0, x,, 4") == ([2.5, 1.0, 4.0], ["x"])


# =============================================================================
# Test GetAttribute
# =============================================================================


class TestGetAttribute:
    """Tests for get_attribute."""

    def test_first_present(self) -> None:
        """Test first present."""
        element = ET.fromstring('<root id="lower"/>')
        assert get_attribute(element, "ID", "id") == "lower"

    def test_namespaced(self) -> None:
        """Test namespaced."""
        element = ET.fromstring(
            '<root xmlns:po="http://www.plantontology.org/xml-dtd/po.dtd" po:accession="PO:1"/>'
        )
        assert get_attribute(element, "po:accession", "poaccession") == "PO:1"

    def test_unprefixed_fallback(self) -> None:
        """Test unprefixed fallback."""
        element = ET.fromstring('<root poaccession="PO:2"/>')
        assert get_attribute(element, "po:accession", "poaccession") == "PO:2"

    def test_missing(self) -> None:
        """Test missing."""
        assert get_attribute(ET.fromstring("<root/>"), "label") == ""
