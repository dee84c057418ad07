"""CLI helpers for parsing dates and months, and formatting money."""

from datetime import date
from decimal import Decimal

import click

from estateledger.utils.date_parser import parse_date
from estateledger.utils.periods import parse_year_month


def resolve_cli_date(ctx, value: str | None, label: str) -> date | None:
    """Parse an optional date option, exiting with an error message if invalid."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_month(ctx, value: str) -> date:
    """Parse a YYYY-MM argument."""
    try:
        return parse_year_month(value)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


def format_money(amount: Decimal | None) -> str:
    """Format an amount with thousands separators, or '-' when unset."""
    if amount is None:
        return "-"
    return f"{amount:,.2f}"
