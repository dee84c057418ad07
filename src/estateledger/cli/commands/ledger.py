"""Ledger report commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money, resolve_cli_month
from estateledger.domain.errors import DomainError
from estateledger.domain.ledger import LedgerAggregatorService
from estateledger.utils.periods import format_period


@click.group()
def ledger_group():
    """Monthly, annual and portfolio ledger reports."""
    pass


@ledger_group.command("month")
@click.argument("community_id", type=int)
@click.argument("month", metavar="YYYY-MM")
@click.pass_context
def month_report(ctx, community_id: int, month: str):
    """Show one community's totals for a month.

    Examples:
        estateledger ledger month 1 2024-03
    """
    period = resolve_cli_month(ctx, month)
    service = LedgerAggregatorService(ctx.obj["db"])
    try:
        rollup = service.aggregate_month(community_id, period)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nLedger for {format_period(rollup.period)}")
    click.echo("-" * 40)
    click.echo(f"Opening balance: {format_money(rollup.opening_balance):>16s}")
    click.echo(f"Collected:       {format_money(rollup.collected):>16s}")
    click.echo(f"Expenses:        {format_money(rollup.expenses):>16s}")
    click.echo(f"Closing balance: {format_money(rollup.closing_balance):>16s}")
    click.echo(f"Pending dues:    {format_money(rollup.pending_dues):>16s}")


@ledger_group.command("year")
@click.argument("community_id", type=int)
@click.argument("year", type=int)
@click.pass_context
def year_report(ctx, community_id: int, year: int):
    """Show a month-by-month breakdown for a calendar year."""
    service = LedgerAggregatorService(ctx.obj["db"])
    try:
        rollup = service.aggregate_year(community_id, year)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nLedger for {rollup.year}")
    click.echo("-" * 72)
    click.echo(f"{'Month':7s} | {'Opening':>14s} | {'Collected':>12s} | {'Expenses':>12s} | {'Closing':>14s}")
    for m in rollup.monthly_breakdown:
        click.echo(
            f"{format_period(m.period):7s} | {format_money(m.opening_balance):>14s} | "
            f"{format_money(m.collected):>12s} | {format_money(m.expenses):>12s} | "
            f"{format_money(m.closing_balance):>14s}"
        )
    click.echo("-" * 72)
    click.echo(
        f"Total collected: {format_money(rollup.total_collected)} | "
        f"Total expenses: {format_money(rollup.total_expenses)} | "
        f"Closing: {format_money(rollup.closing_balance)}"
    )


@ledger_group.command("portfolio")
@click.argument("month", metavar="YYYY-MM")
@click.pass_context
def portfolio_report(ctx, month: str):
    """Compare all communities for a month, highest collection first."""
    period = resolve_cli_month(ctx, month)
    service = LedgerAggregatorService(ctx.obj["db"])
    totals = service.aggregate_all_communities(period)
    if not totals:
        click.echo("No communities found.")
        return

    click.echo(f"\nPortfolio for {format_period(period)}")
    click.echo("-" * 72)
    for t in totals:
        click.echo(
            f"{t.community_name:24s} | Collected {format_money(t.collected):>12s} | "
            f"Expenses {format_money(t.expenses):>12s} | Pending {format_money(t.pending_dues):>12s}"
        )


@ledger_group.command("years")
@click.option("--community", "community_id", type=int, help="Limit to one community")
@click.pass_context
def financial_years(ctx, community_id: int | None):
    """List years that have ledger activity."""
    service = LedgerAggregatorService(ctx.obj["db"])
    try:
        years = service.list_financial_years(community_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    for year in years:
        click.echo(str(year))


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
