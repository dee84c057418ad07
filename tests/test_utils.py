"""Tests for period and amount helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from estateledger.utils.amount_parser import parse_amount
from estateledger.utils.periods import (
    add_months,
    days_in_month,
    format_period,
    iter_periods,
    month_bounds,
    normalize_period,
    parse_year_month,
    round_half_up,
    to_utc_date,
)


class TestPeriods:
    def test_normalize_period(self):
        assert normalize_period(date(2024, 2, 29)) == date(2024, 2, 1)

    def test_aware_datetime_converted_to_utc(self):
        late_evening_new_york = datetime(2024, 1, 31, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert to_utc_date(late_evening_new_york) == date(2024, 2, 1)
        assert normalize_period(late_evening_new_york) == date(2024, 2, 1)

    def test_naive_datetime_treated_as_utc(self):
        assert to_utc_date(datetime(2024, 1, 31, 23, 59)) == date(2024, 1, 31)

    def test_add_months_across_year(self):
        assert add_months(date(2024, 11, 1), 3) == date(2025, 2, 1)

    def test_days_in_month(self):
        assert days_in_month(date(2024, 2, 10)) == 29
        assert days_in_month(date(2023, 2, 10)) == 28
        assert days_in_month(date(2024, 4, 1)) == 30

    def test_iter_periods_inclusive(self):
        assert list(iter_periods(date(2024, 11, 20), date(2025, 1, 5))) == [
            date(2024, 11, 1),
            date(2024, 12, 1),
            date(2025, 1, 1),
        ]

    def test_iter_periods_empty_when_reversed(self):
        assert list(iter_periods(date(2024, 5, 1), date(2024, 4, 1))) == []

    def test_iter_periods_ends_at_last_representable_month(self):
        assert list(iter_periods(date(9999, 11, 1), date(9999, 12, 31))) == [
            date(9999, 11, 1),
            date(9999, 12, 1),
        ]

    def test_month_bounds(self):
        assert month_bounds(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_round_half_up(self):
        assert round_half_up(Decimal("2.5")) == Decimal("3")
        assert round_half_up(Decimal("3.5")) == Decimal("4")
        assert round_half_up(Decimal("2.49")) == Decimal("2")

    def test_parse_year_month(self):
        assert parse_year_month("2024-03") == date(2024, 3, 1)
        assert parse_year_month("2024-3") == date(2024, 3, 1)
        assert parse_year_month(date(2024, 3, 17)) == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["2024-13", "2024/03", "March 2024", ""])
    def test_parse_year_month_invalid(self, value):
        with pytest.raises(ValueError):
            parse_year_month(value)

    def test_format_period(self):
        assert format_period(date(2024, 3, 1)) == "2024-03"


class TestParseAmount:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1234.50", Decimal("1234.50")),
            ("₹1,234.50", Decimal("1234.50")),
            ("$99", Decimal("99")),
            ("-250", Decimal("-250")),
            ("(250)", Decimal("-250")),
            (42, Decimal("42")),
            (0.1, Decimal("0.1")),
        ],
    )
    def test_valid(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "NaN", "Infinity", True])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_amount(raw)

    def test_max_places(self):
        assert parse_amount("10.50", max_places=2) == Decimal("10.50")
        assert parse_amount("10.5000", max_places=2) == Decimal("10.5000")
        assert parse_amount("100000", max_places=0) == Decimal("100000")
        with pytest.raises(ValueError):
            parse_amount("10.505", max_places=2)
