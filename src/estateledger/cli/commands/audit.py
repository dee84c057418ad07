"""Audit trail commands."""

import json

import click

from estateledger.cli.error_handling import handle_domain_error
from estateledger.domain.audit import AuditService
from estateledger.domain.errors import DomainError


@click.group()
def audit_group():
    """Inspect the audit trail."""
    pass


@audit_group.command("log")
@click.argument("community_id", type=int)
@click.option("--entity", "entity_kind", help="Entity kind (e.g., Community, Unit, LedgerRecord, Expense)")
@click.option("--entity-id", help="Show one entity's history, oldest first")
@click.option("--limit", type=int, default=200, show_default=True, help="Maximum entries")
@click.pass_context
def audit_log(ctx, community_id: int, entity_kind: str | None, entity_id: str | None, limit: int):
    """Show audited changes with field-level differences.

    Examples:
        estateledger audit log 1
        estateledger audit log 1 --entity Community --entity-id 1
    """
    service = AuditService(ctx.obj["db"])
    try:
        entries = service.history(
            community_id, ctx.obj["principal"], entity_kind=entity_kind, entity_id=entity_id, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No audit entries found.")
        return

    for entry in entries:
        click.echo(
            f"[{entry.created_at:%Y-%m-%d %H:%M:%S}] {entry.action.value} "
            f"{entry.entity_kind}#{entry.entity_id} by {entry.actor_id}"
        )
        if entry.description:
            click.echo(f"    {entry.description}")
        changes = service.describe(entry)
        if changes.has_changes:
            for change in changes.changes:
                click.echo(
                    f"    {change.key}: {json.dumps(change.old_value)} -> {json.dumps(change.new_value)}"
                )
        elif changes.snapshot is not None:
            click.echo(f"    {json.dumps(changes.snapshot, sort_keys=True)}")


def register_commands(cli):
    """Register audit commands with main CLI."""
    cli.add_command(audit_group, name="audit")
