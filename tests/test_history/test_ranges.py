"""Tests for ticker/range validation and range parameter mapping."""

from datetime import date

import pytest

from tracker.exceptions import InvalidInput
from tracker.history.ranges import (
    investidor10_days,
    is_intraday,
    rate_window_start,
    to_yahoo_symbol,
    validate_range,
    validate_ticker,
    yahoo_params,
)


class TestValidateTicker:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("petr4", "PETR4"),
            ("  hglg11 ", "HGLG11"),
            ("^BVSP", "^BVSP"),
            ("ITUB4.SA", "ITUB4.SA"),
            ("AAPL", "AAPL"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        assert validate_ticker(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing(self, raw: str | None) -> None:
        with pytest.raises(InvalidInput, match="Ticker required"):
            validate_ticker(raw)

    @pytest.mark.parametrize("raw", ["AB", "PETR4;DROP", "A" * 13, "PETR4.SAO", "../x"])
    def test_malformed(self, raw: str) -> None:
        with pytest.raises(InvalidInput, match="Invalid ticker format"):
            validate_ticker(raw)


class TestValidateRange:
    def test_default(self) -> None:
        assert validate_range(None) == "1Y"
        assert validate_range("") == "1Y"

    @pytest.mark.parametrize("raw", ["1D", "5D", "1M", "YTD", "MAX", "1h", "1wk", "Tudo"])
    def test_supported(self, raw: str) -> None:
        assert validate_range(raw) == raw

    # Range keys are case-sensitive: "1y" is not "1Y"
    @pytest.mark.parametrize("raw", ["2W", "forever", "1y"])
    def test_unsupported(self, raw: str) -> None:
        with pytest.raises(InvalidInput, match="Invalid range"):
            validate_range(raw)


class TestMappings:
    def test_yahoo_params(self) -> None:
        assert yahoo_params("1D") == ("1d", "5m")
        assert yahoo_params("5Y") == ("5y", "1wk")
        assert yahoo_params("10m") == ("1d", "5m")
        assert yahoo_params("Tudo") == ("max", "1mo")

    def test_investidor10_days(self) -> None:
        assert investidor10_days("1M") == 30
        assert investidor10_days("MAX") == 36500
        assert investidor10_days("5A") == 1825
        assert investidor10_days("1wk") == 365

    def test_is_intraday(self) -> None:
        assert is_intraday("1h")
        assert is_intraday("5D")
        assert not is_intraday("1M")
        assert not is_intraday("1d")

    @pytest.mark.parametrize(
        ("ticker", "expected"),
        [
            ("PETR4", "PETR4.SA"),
            ("HGLG11", "HGLG11.SA"),
            ("AAPL", "AAPL"),
            ("^BVSP", "^BVSP"),
            ("IFIX.SA", "IFIX.SA"),
        ],
    )
    def test_to_yahoo_symbol(self, ticker: str, expected: str) -> None:
        assert to_yahoo_symbol(ticker) == expected


class TestRateWindowStart:
    TODAY = date(2024, 3, 31)

    @pytest.mark.parametrize(
        ("range_key", "expected"),
        [
            ("1D", date(2024, 3, 31)),
            ("5D", date(2024, 3, 21)),
            ("1M", date(2024, 1, 31)),
            ("6M", date(2023, 8, 31)),
            ("YTD", date(2024, 1, 1)),
            ("1Y", date(2023, 2, 28)),
            ("1A", date(2023, 2, 28)),
            ("2Y", date(2022, 3, 31)),
            ("5Y", date(2019, 3, 31)),
            ("10Y", date(2014, 3, 31)),
            ("MAX", date(2009, 3, 31)),
            ("1h", date(2023, 3, 31)),
        ],
    )
    def test_window_start(self, range_key: str, expected: date) -> None:
        assert rate_window_start(range_key, self.TODAY) == expected

    def test_month_end_clamped(self) -> None:
        assert rate_window_start("1M", date(2024, 4, 30)) == date(2024, 2, 29)
