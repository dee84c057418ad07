"""Opening balance commands."""

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.cli.parsing import format_money
from estateledger.domain.community import CommunityService
from estateledger.domain.errors import DomainError
from estateledger.domain.opening_balance import OpeningBalanceService


@click.group()
def balance_group():
    """Manage a community's opening balance (dual control)."""
    pass


@balance_group.command("show")
@click.argument("community_id", type=int)
@click.pass_context
def show_balance(ctx, community_id: int):
    """Show the opening balance and any pending revision."""
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        community = CommunityService(ctx.obj["db"]).require_community(community_id)
        state = service.get_state(community_id)
        pending = service.get_pending_request(community_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Opening balance: {format_money(community.opening_balance)} ({state.value})")
    if pending is not None:
        click.echo(
            f"Pending revision #{pending.id}: {format_money(pending.amount)} "
            f"requested by {pending.requester_id}: {pending.reason}"
        )


@balance_group.command("draft")
@click.argument("community_id", type=int)
@click.argument("amount")
@click.pass_context
def draft_balance(ctx, community_id: int, amount: str):
    """Save an editable opening balance without locking it."""
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        community = service.save_draft(community_id, ctx.obj["principal"], amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Draft opening balance saved: {format_money(community.opening_balance)}")


@balance_group.command("set")
@click.argument("community_id", type=int)
@click.argument("amount")
@click.pass_context
def set_balance(ctx, community_id: int, amount: str):
    """Set and lock the opening balance.

    Once locked, changes need a revision request approved by another admin.
    """
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        community = service.set_initial(community_id, ctx.obj["principal"], amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Opening balance locked at {format_money(community.opening_balance)}")


@balance_group.command("request")
@click.argument("community_id", type=int)
@click.argument("amount")
@click.option("--reason", required=True, help="Why the locked balance must change")
@click.pass_context
def request_revision(ctx, community_id: int, amount: str, reason: str):
    """Request a revision of a locked opening balance."""
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        request = service.request_revision(community_id, ctx.obj["principal"], amount, reason)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Revision #{request.id} to {format_money(request.amount)} submitted; "
        "another administrator must approve it"
    )


@balance_group.command("approve")
@click.argument("community_id", type=int)
@click.pass_context
def approve_revision(ctx, community_id: int):
    """Approve the pending revision and apply it."""
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        community = service.approve_revision(community_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Revision approved; opening balance is now {format_money(community.opening_balance)}")


@balance_group.command("reject")
@click.argument("community_id", type=int)
@click.pass_context
def reject_revision(ctx, community_id: int):
    """Reject the pending revision."""
    service = OpeningBalanceService(ctx.obj["db"])
    try:
        community = service.reject_revision(community_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Revision rejected; opening balance stays {format_money(community.opening_balance)}")


def register_commands(cli):
    """Register opening balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
