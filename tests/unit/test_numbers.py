"""Unit tests for shared numeric helpers."""

import pytest

from chronicle.utils.numbers import (
    change_percent,
    format_number,
    format_percent,
    humanize_metric,
    is_number,
)


class TestIsNumber:
    """Tests for is_number."""

    @pytest.mark.parametrize("value", [0, 1, -3, 0.5, 1e9])
    def test_numbers(self, value) -> None:
        assert is_number(value)

    @pytest.mark.parametrize("value", [True, False, None, "1", [1], {"a": 1}])
    def test_non_numbers(self, value) -> None:
        assert not is_number(value)


class TestChangePercent:
    """Tests for change_percent zero handling and sign."""

    def test_increase(self) -> None:
        assert change_percent(1000, 1200) == pytest.approx(0.2)

    def test_decrease_uses_absolute_base(self) -> None:
        assert change_percent(-10, -20) == pytest.approx(-1.0)

    def test_zero_to_zero(self) -> None:
        assert change_percent(0, 0) == 0.0

    def test_zero_to_value(self) -> None:
        assert change_percent(0, 5) == 1.0
        assert change_percent(0, -5) == 1.0


class TestFormatting:
    """Tests for display helpers."""

    def test_format_percent_positive(self) -> None:
        assert format_percent(0.2) == "+20.0%"

    def test_format_percent_zero(self) -> None:
        assert format_percent(0.0) == "+0.0%"

    def test_format_percent_negative(self) -> None:
        assert format_percent(-0.125) == "-12.5%"

    def test_format_number(self) -> None:
        assert format_number(80.0) == "80"
        assert format_number(0.25) == "0.25"
        assert format_number(7) == "7"

    def test_humanize_snake_case(self) -> None:
        assert humanize_metric("audience_size") == "audience size"

    def test_humanize_camel_case(self) -> None:
        assert humanize_metric("brandHealth") == "brand Health"
