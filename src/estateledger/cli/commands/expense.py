"""Expense commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money, resolve_cli_date
from estateledger.domain.entities import ExpenseStatus
from estateledger.domain.errors import DomainError
from estateledger.domain.expenses import ExpenseService
from estateledger.utils.date_parser import utc_today


@click.group()
def expense_group():
    """Record and review community expenses."""
    pass


@expense_group.command("add")
@click.argument("community_id", type=int)
@click.argument("title", metavar="TITLE")
@click.argument("amount")
@click.option("--date", "expense_date", help="Expense date (YYYY-MM-DD or relative like 'yesterday'; default: today)")
@click.option("--notes", help="Notes")
@click.pass_context
def add_expense(
    ctx, community_id: int, title: str, amount: str, expense_date: str | None, notes: str | None
):
    """Record a pending expense.

    Examples:
        estateledger expense add 1 "Lift maintenance" 12000 --date 2024-03-05
    """
    spent_on = resolve_cli_date(ctx, expense_date, "expense date") or utc_today()
    service = ExpenseService(ctx.obj["db"])
    try:
        expense = service.create_expense(
            community_id, ctx.obj["principal"], title, amount, spent_on, notes=notes
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded expense '{expense.title}' (ID: {expense.id}) for {format_money(expense.amount)}")


@expense_group.command("approve")
@click.argument("expense_id", type=int)
@click.pass_context
def approve_expense(ctx, expense_id: int):
    """Approve a pending expense (not your own)."""
    service = ExpenseService(ctx.obj["db"])
    try:
        expense = service.approve_expense(expense_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Expense {expense.id} approved")


@expense_group.command("reject")
@click.argument("expense_id", type=int)
@click.option("--notes", help="Reason for rejection")
@click.pass_context
def reject_expense(ctx, expense_id: int, notes: str | None):
    """Reject a pending expense (not your own)."""
    service = ExpenseService(ctx.obj["db"])
    try:
        expense = service.reject_expense(expense_id, ctx.obj["principal"], notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Expense {expense.id} rejected")


@expense_group.command("list")
@click.argument("community_id", type=int)
@click.option("--status", type=click.Choice([s.value for s in ExpenseStatus]), help="Filter by status")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.pass_context
def list_expenses(
    ctx, community_id: int, status: str | None, start_date: str | None, end_date: str | None
):
    """List a community's expenses."""
    start = resolve_cli_date(ctx, start_date, "start date")
    end = resolve_cli_date(ctx, end_date, "end date")
    service = ExpenseService(ctx.obj["db"])
    try:
        expenses = service.list_expenses(
            community_id,
            ctx.obj["principal"],
            start_date=start,
            end_date=end,
            status=ExpenseStatus(status) if status else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not expenses:
        click.echo("No expenses found.")
        return

    click.echo("\nExpenses:")
    click.echo("-" * 72)
    for e in expenses:
        click.echo(
            f"ID: {e.id:4d} | {e.expense_date.isoformat()} | {e.title:24s} | "
            f"{format_money(e.amount):>12s} | {e.status.value}"
        )


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
