"""Unit management commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money, resolve_cli_date
from estateledger.domain.community import UnitService
from estateledger.domain.errors import DomainError
from estateledger.utils.periods import format_period


@click.group()
def unit_group():
    """Manage units."""
    pass


@unit_group.command("add")
@click.argument("community_id", type=int)
@click.argument("label", metavar="LABEL")
@click.option("--area", help="Floor area used for area-rate billing")
@click.option("--resident", help="User ID of the resident paying this unit's dues")
@click.pass_context
def add_unit(ctx, community_id: int, label: str, area: str | None, resident: str | None):
    """Add a unit to a community.

    Examples:
        estateledger unit add 1 "A-101" --area 1200 --resident alice
    """
    service = UnitService(ctx.obj["db"])
    try:
        unit = service.create_unit(
            community_id, ctx.obj["principal"], label, floor_area=area, resident_id=resident
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added unit '{unit.label}' (ID: {unit.id}) to community {community_id}")


@unit_group.command("list")
@click.argument("community_id", type=int)
@click.pass_context
def list_units(ctx, community_id: int):
    """List a community's units."""
    service = UnitService(ctx.obj["db"])
    try:
        units = service.list_units(community_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not units:
        click.echo("No units found.")
        return

    click.echo("\nUnits:")
    click.echo("-" * 72)
    for u in units:
        start = u.billing_start_date.isoformat() if u.billing_start_date else "-"
        click.echo(
            f"ID: {u.id:3d} | {u.label:10s} | Area: {format_money(u.floor_area):>10s} | "
            f"Start: {start:10s} | Resident: {u.resident_id or '-'}"
        )


@unit_group.command("set-start")
@click.argument("unit_id", type=int)
@click.argument("start_date", metavar="START_DATE")
@click.option("--as-of", help="Bill up to this date (default: today, UTC)")
@click.pass_context
def set_billing_start(ctx, unit_id: int, start_date: str, as_of: str | None):
    """Set a unit's billing start date and backfill its dues.

    Existing dues are never changed.

    Examples:
        estateledger unit set-start 3 2024-01-15
        estateledger unit set-start 3 "last month" --as-of 2024-06-30
    """
    start = resolve_cli_date(ctx, start_date, "start date")
    as_of_date = resolve_cli_date(ctx, as_of, "as-of date")

    service = UnitService(ctx.obj["db"])
    try:
        created = service.set_billing_start(unit_id, ctx.obj["principal"], start, as_of=as_of_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Billing start of unit {unit_id} set to {start.isoformat()}")
    click.echo(f"Generated {len(created)} ledger record{'s' if len(created) != 1 else ''}")
    for record in created:
        click.echo(f"  {format_period(record.period)}: {format_money(record.amount)}")


def register_commands(cli):
    """Register unit commands with main CLI."""
    cli.add_command(unit_group, name="unit")
