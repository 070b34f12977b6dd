"""
Tests for the Code39 encoder.
"""
from ticketwise.services import barcode


def pattern_width(char: str) -> int:
    return sum(barcode.WIDE if unit == "w" else barcode.NARROW for unit in barcode.CODE39[char])


class TestNormalize:
    """Tests for input normalization."""

    def test_uppercases_and_replaces_unsupported(self):
        """Lowercase letters are uppercased, '#' becomes '-'."""
        assert barcode.normalize("ab#") == "AB-"

    def test_keeps_supported_symbols(self):
        assert barcode.normalize("P-25 0.1$/+%") == "P-25 0.1$/+%"

    def test_never_drops_positions(self):
        value = "é@p!z"
        assert len(barcode.normalize(value)) == len(value)

    def test_multi_character_uppercase_keeps_length(self):
        """'ß' uppercases to 'SS' in Python; it must still occupy one symbol."""
        assert barcode.normalize("straße") == "STRA-E"
        assert barcode.encode("ß").text == "*-*"

    def test_empty(self):
        assert barcode.normalize("") == ""
        assert barcode.normalize(None) == ""


class TestEncode:
    """Tests for the element sequence."""

    def test_wraps_with_sentinels(self):
        assert barcode.encode("P-25001").text == "*P-25001*"

    def test_total_width(self):
        """Quiet zones + symbol widths + narrow gaps between symbols."""
        encoded = barcode.encode("P-25001")
        text = "*P-25001*"
        expected = 2 * barcode.QUIET_ZONE + sum(pattern_width(c) for c in text) + (len(text) - 1)

        assert encoded.total_width == expected
        assert encoded.total_width == 163

    def test_elements_cover_the_strip(self):
        """Elements are contiguous and add up to the total width."""
        encoded = barcode.encode("C-260042")
        position = 0
        for element in encoded.elements:
            assert element.position == position
            position += element.width
        assert position == encoded.total_width

    def test_each_symbol_has_five_bars(self):
        encoded = barcode.encode("ab#")
        assert encoded.text == "*AB-*"
        assert len(encoded.bars) == 5 * len(encoded.text)

    def test_every_symbol_has_three_wide_elements(self):
        for char, pattern in barcode.CODE39.items():
            assert len(pattern) == 9, char
            assert pattern.count("w") == 3, char
            assert pattern_width(char) == 15


class TestSvg:
    """Tests for the SVG output."""

    def test_rect_per_bar(self):
        rects = barcode.to_svg_rects("P-250001", 0, 0, 30, 7.5)
        assert rects.count("<rect") == len(barcode.encode("P-250001").bars)

    def test_standalone_svg_stretches(self):
        svg = barcode.to_svg("E-260001")
        assert svg.startswith("<svg")
        assert 'preserveAspectRatio="none"' in svg
        assert f'viewBox="0 0 {barcode.encode("E-260001").total_width} 40"' in svg
