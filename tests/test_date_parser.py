"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from estateledger.utils.date_parser import parse_date

TODAY = date(2024, 3, 15)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_written_date():
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today", today=TODAY) == TODAY


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date("Yesterday", today=TODAY) == TODAY - timedelta(days=1)


def test_parse_tomorrow():
    assert parse_date("tomorrow", today=TODAY) == TODAY + timedelta(days=1)


def test_parse_last_month_across_year():
    """'last month' in January is December of the previous year."""
    assert parse_date("last month", today=date(2024, 1, 20)) == date(2023, 12, 1)


def test_parse_this_and_next_month():
    assert parse_date("this month", today=TODAY) == date(2024, 3, 1)
    assert parse_date("next month", today=date(2024, 12, 31)) == date(2025, 1, 1)


def test_parse_invalid_date():
    """Test parsing invalid date raises error."""
    with pytest.raises(ValueError):
        parse_date("not a date")
