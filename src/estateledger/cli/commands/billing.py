"""Billing run commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money, resolve_cli_date
from estateledger.domain.errors import DomainError, NotFoundError, unit_not_found
from estateledger.domain.periods import PeriodGeneratorService
from estateledger.utils.date_parser import utc_today
from estateledger.utils.periods import format_period


@click.group()
def billing_group():
    """Generate maintenance dues."""
    pass


@billing_group.command("generate")
@click.option("--community", "community_id", type=int, help="Only bill this community")
@click.option("--unit", "unit_id", type=int, help="Only bill this unit")
@click.option("--as-of", help="Bill up to the month of this date (default: today, UTC)")
@click.pass_context
def generate(ctx, community_id: int | None, unit_id: int | None, as_of: str | None):
    """Backfill missing dues up to the current month.

    Safe to re-run: months that already have a record are skipped.

    Examples:
        estateledger billing generate
        estateledger billing generate --community 1 --as-of 2024-06-30
        estateledger billing generate --unit 7
    """
    db = ctx.obj["db"]
    actor_id = ctx.obj["principal"].id
    as_of_date = resolve_cli_date(ctx, as_of, "as-of date") or utc_today()
    service = PeriodGeneratorService(db)

    try:
        if unit_id is not None:
            unit = db.get_unit(unit_id)
            if unit is None:
                raise NotFoundError(unit_not_found(unit_id))
            created = service.generate_periods(
                unit_id, community_id if community_id is not None else unit.community_id,
                as_of_date, actor_id=actor_id,
            )
        elif community_id is not None:
            created = list(service.generate_for_community(community_id, as_of_date, actor_id).created)
        else:
            summary = service.generate_all(as_of_date, actor_id)
            click.echo(f"Billed {summary.units} units across {summary.communities} communities")
            created = list(summary.created)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Generated {len(created)} ledger record{'s' if len(created) != 1 else ''} "
        f"up to {format_period(as_of_date)}"
    )
    for record in created:
        click.echo(
            f"  Unit {record.unit_id:4d} | {format_period(record.period)} | {format_money(record.amount)}"
        )


def register_commands(cli):
    """Register billing commands with main CLI."""
    cli.add_command(billing_group, name="billing")
