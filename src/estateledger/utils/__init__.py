"""Utility functions for estateledger."""

from estateledger.utils.date_parser import parse_date, utc_today
from estateledger.utils.amount_parser import parse_amount
from estateledger.utils.periods import normalize_period, parse_year_month

__all__ = ["parse_date", "utc_today", "parse_amount", "normalize_period", "parse_year_month"]
