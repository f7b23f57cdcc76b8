import pytest

from team_stat_entry.services.formatting import SENTINEL, format_count, format_innings, format_rate


class TestFormatRate:
    def test_strips_leading_zero(self) -> None:
        assert format_rate(0.5) == ".500"
        assert format_rate(0.0) == ".000"

    def test_keeps_whole_part(self) -> None:
        assert format_rate(1.35) == "1.350"

    def test_decimals(self) -> None:
        assert format_rate(5.0625, 2) == "5.06"

    @pytest.mark.parametrize("value", [None, float("nan"), float("inf")])
    def test_undefined(self, value: float | None) -> None:
        assert format_rate(value) == SENTINEL


class TestFormatInnings:
    def test_outs_notation(self) -> None:
        assert format_innings(6.2) == "6.2"
        assert format_innings(7) == "7.0"
        assert format_innings("5.1") == "5.1"

    def test_undefined(self) -> None:
        assert format_innings(float("inf")) == SENTINEL
        assert format_innings("x") == SENTINEL


def test_format_count() -> None:
    assert format_count(3) == "3"
    assert format_count(None) == SENTINEL
