"""
Tests for string helpers.
"""

import pytest

from sqlplot_tools.utils import decimals_of, is_double, is_integer, shorten, split_fields


class TestNumberDetection:
    """Test integer and double detection."""

    @pytest.mark.parametrize("text", ["0", "-12", "+7", "123456789012"])
    def test_integers(self, text):
        assert is_integer(text)
        assert is_double(text)

    @pytest.mark.parametrize("text", ["1.5", ".5", "5.", "-2.5e-3", "1E10"])
    def test_doubles(self, text):
        assert is_double(text)
        assert not is_integer(text)

    @pytest.mark.parametrize("text", ["", "abc", "1,5", "1.2.3", "nan", "inf", "0x10", " 1"])
    def test_not_numbers(self, text):
        assert not is_double(text)


class TestDecimals:
    """Test decimals_of."""

    @pytest.mark.parametrize("text, expected", [
        ("12", 0),
        ("1.250", 3),
        ("1.5e3", 0),
        ("2e-3", 3),
        ("0.25", 2),
    ])
    def test_decimals_of(self, text, expected):
        assert decimals_of(text) == expected


class TestShorten:
    """Test argument shortening for END markers."""

    def test_short_text_unchanged(self):
        assert shorten("SELECT 1") == "SELECT 1"

    def test_long_text_truncated(self):
        text = "x" * 100
        result = shorten(text)

        assert len(result) == 80
        assert result.endswith("...")
        assert result.startswith("x" * 77)


class TestSplitFields:
    """Test field splitting of RESULT lines."""

    def test_split_on_spaces(self):
        assert split_fields("a=1  b=2 c") == ["a=1", "b=2", "c"]

    def test_split_on_tabs_keeps_spaces(self):
        assert split_fields("name=a b\tn=2") == ["name=a b", "n=2"]
