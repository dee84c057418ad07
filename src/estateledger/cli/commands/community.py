"""Community management commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money, resolve_cli_date
from estateledger.domain.community import CommunityService
from estateledger.domain.entities import BillingMode, CommunityStatus
from estateledger.domain.errors import DomainError
from estateledger.domain.opening_balance import OpeningBalanceService

MODE_CHOICES = [m.value for m in BillingMode]


@click.group()
def community_group():
    """Manage communities."""
    pass


@community_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--type", "community_type", help="Community type label (e.g., 'Apartment', 'Standalone Houses')")
@click.option("--mode", type=click.Choice(MODE_CHOICES), help="Billing mode (derived from --type if omitted)")
@click.option("--rate", help="Rate per unit of floor area")
@click.option("--fixed", help="Fixed monthly amount per unit")
@click.pass_context
def create_community(
    ctx, name: str, community_type: str | None, mode: str | None, rate: str | None, fixed: str | None
):
    """Create a new community.

    Examples:
        estateledger community create "Green Meadows" --type Apartment --rate 2.5
        estateledger community create "Palm Villas" --type "Standalone Houses" --fixed 3000
    """
    service = CommunityService(ctx.obj["db"])
    try:
        community = service.create_community(
            ctx.obj["principal"],
            name,
            community_type=community_type,
            billing_mode=BillingMode(mode) if mode else None,
            rate_per_area=rate,
            fixed_amount=fixed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Created community '{community.name}' (ID: {community.id}), "
        f"billing mode {community.billing_mode.value}"
    )


@community_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in CommunityStatus]), help="Filter by status")
@click.pass_context
def list_communities(ctx, status: str | None):
    """List communities."""
    service = CommunityService(ctx.obj["db"])
    communities = service.list_communities(CommunityStatus(status) if status else None)
    if not communities:
        click.echo("No communities found.")
        return

    click.echo("\nCommunities:")
    click.echo("-" * 72)
    for c in communities:
        click.echo(
            f"ID: {c.id:3d} | {c.name:24s} | {c.billing_mode.value:11s} | {c.status.value}"
        )


@community_group.command("show")
@click.argument("community_id", type=int)
@click.pass_context
def show_community(ctx, community_id: int):
    """Show a community's billing and opening balance details."""
    db = ctx.obj["db"]
    service = CommunityService(db)
    try:
        community = service.require_community(community_id)
        state = OpeningBalanceService(db).get_state(community_id)
        configs = service.list_maintenance_configs(community_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{community.name} (ID: {community.id})")
    click.echo("-" * 40)
    click.echo(f"Type:            {community.community_type or '-'}")
    click.echo(f"Billing mode:    {community.billing_mode.value}")
    click.echo(f"Rate per area:   {format_money(community.rate_per_area)}")
    click.echo(f"Fixed amount:    {format_money(community.fixed_amount)}")
    click.echo(f"Opening balance: {format_money(community.opening_balance)} ({state.value})")
    click.echo(f"Status:          {community.status.value}")
    if configs:
        click.echo("\nRate history:")
        for config in configs:
            click.echo(
                f"  from {config.effective_date:%Y-%m}: rate {format_money(config.rate_per_area)}, "
                f"fixed {format_money(config.fixed_amount)}"
            )


@community_group.command("configure")
@click.argument("community_id", type=int)
@click.option("--type", "community_type", help="New community type label")
@click.option("--mode", type=click.Choice(MODE_CHOICES), help="New billing mode")
@click.option("--rate", help="New rate per unit of floor area")
@click.option("--fixed", help="New fixed monthly amount per unit")
@click.pass_context
def configure_community(
    ctx,
    community_id: int,
    community_type: str | None,
    mode: str | None,
    rate: str | None,
    fixed: str | None,
):
    """Update a community's billing configuration.

    Already generated dues keep their amounts.
    """
    service = CommunityService(ctx.obj["db"])
    try:
        community = service.update_billing(
            community_id,
            ctx.obj["principal"],
            community_type=community_type,
            billing_mode=BillingMode(mode) if mode else None,
            rate_per_area=rate,
            fixed_amount=fixed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated billing for '{community.name}' ({community.billing_mode.value})")


@community_group.command("add-rate")
@click.argument("community_id", type=int)
@click.option("--effective", required=True, help="Effective date (YYYY-MM-DD or relative like 'next month')")
@click.option("--rate", help="Rate per unit of floor area")
@click.option("--fixed", help="Fixed monthly amount per unit")
@click.pass_context
def add_rate(ctx, community_id: int, effective: str, rate: str | None, fixed: str | None):
    """Schedule a rate change starting from the month of --effective."""
    effective_date = resolve_cli_date(ctx, effective, "effective date")
    service = CommunityService(ctx.obj["db"])
    try:
        config = service.add_maintenance_config(
            community_id,
            ctx.obj["principal"],
            effective_date,
            rate_per_area=rate,
            fixed_amount=fixed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rates effective from {config.effective_date:%Y-%m} recorded (ID: {config.id})")


def _set_status(ctx, community_id: int, status: CommunityStatus) -> None:
    service = CommunityService(ctx.obj["db"])
    try:
        community = service.set_status(community_id, ctx.obj["principal"], status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Community '{community.name}' is now {community.status.value}")


@community_group.command("disable")
@click.argument("community_id", type=int)
@click.pass_context
def disable_community(ctx, community_id: int):
    """Disable a community; it is skipped by billing runs."""
    _set_status(ctx, community_id, CommunityStatus.DISABLED)


@community_group.command("enable")
@click.argument("community_id", type=int)
@click.pass_context
def enable_community(ctx, community_id: int):
    """Re-enable a disabled community."""
    _set_status(ctx, community_id, CommunityStatus.ACTIVE)


def register_commands(cli):
    """Register community commands with main CLI."""
    cli.add_command(community_group, name="community")
