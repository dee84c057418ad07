"""Dues payment commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money
from estateledger.domain.entities import LedgerStatus
from estateledger.domain.errors import DomainError
from estateledger.domain.payments import PaymentService
from estateledger.utils.periods import format_period


@click.group()
def payment_group():
    """Submit and verify maintenance payments."""
    pass


@payment_group.command("submit")
@click.argument("record_id", type=int)
@click.argument("reference", metavar="REFERENCE")
@click.pass_context
def submit_payment(ctx, record_id: int, reference: str):
    """Report a payment for a dues record (resident only).

    Examples:
        estateledger --actor alice --role Resident --actor-community 1 payment submit 12 UPI-88213
    """
    service = PaymentService(ctx.obj["db"])
    try:
        record = service.submit_payment(record_id, ctx.obj["principal"], reference)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Payment for {format_period(record.period)} submitted; awaiting verification")


@payment_group.command("verify")
@click.argument("record_id", type=int)
@click.pass_context
def verify_payment(ctx, record_id: int):
    """Mark a dues record as paid (admin only)."""
    service = PaymentService(ctx.obj["db"])
    try:
        record = service.verify_payment(record_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Ledger record {record.id} ({format_period(record.period)}, "
        f"{format_money(record.amount)}) marked {record.status.value}"
    )


@payment_group.command("list")
@click.argument("community_id", type=int)
@click.option("--unit", "unit_id", type=int, help="Only this unit's dues")
@click.option("--status", type=click.Choice([s.value for s in LedgerStatus]), help="Filter by status")
@click.pass_context
def list_dues(ctx, community_id: int, unit_id: int | None, status: str | None):
    """List dues records of a community."""
    service = PaymentService(ctx.obj["db"])
    try:
        records = service.list_dues(
            community_id,
            ctx.obj["principal"],
            unit_id=unit_id,
            status=LedgerStatus(status) if status else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not records:
        click.echo("No dues found.")
        return

    click.echo("\nDues:")
    click.echo("-" * 72)
    for r in records:
        click.echo(
            f"ID: {r.id:4d} | Unit {r.unit_id:4d} | {format_period(r.period)} | "
            f"{format_money(r.amount):>12s} | {r.status.value:9s} | {r.payment_reference or ''}"
        )


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(payment_group, name="payment")
