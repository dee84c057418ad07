"""Main CLI entry point."""

import click

from estateledger.database.factories import create_database, create_sqlite_database
from estateledger.domain.entities import Principal, Role
from estateledger.logging_config import LOG_LEVEL_MAP, setup_logging

# Import and register all commands at module level
from estateledger.cli.commands import (
    audit,
    balance,
    billing,
    community,
    expense,
    ledger,
    payment,
    unit,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides ESTATELEDGER_DB_PATH environment variable)",
    envvar="ESTATELEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(list(LOG_LEVEL_MAP), case_sensitive=False),
    help="Logging level (overrides ESTATELEDGER_LOG_LEVEL environment variable)",
)
@click.option(
    "--actor",
    default="admin",
    show_default=True,
    envvar="ESTATELEDGER_ACTOR",
    help="User ID recorded as the actor of every change",
)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.SUPER_ADMIN.value,
    show_default=True,
    envvar="ESTATELEDGER_ROLE",
    help="Role of the acting user",
)
@click.option(
    "--actor-community",
    type=int,
    envvar="ESTATELEDGER_ACTOR_COMMUNITY",
    help="Community the acting user belongs to",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    log_level: str | None,
    actor: str,
    role: str,
    actor_community: int | None,
):
    """EstateLedger - Maintenance billing and ledger for residential communities.

    Generates monthly maintenance dues per unit, tracks payments and
    expenses, and keeps an audited, dual-controlled opening balance.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        if db_path is not None:
            db = create_sqlite_database(database_path=db_path)
        else:
            db = create_database()
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)
        ctx.obj["principal"] = Principal(
            id=actor, role=Role(role), community_id=actor_community
        )


# Register all commands
community.register_commands(cli)
unit.register_commands(cli)
billing.register_commands(cli)
balance.register_commands(cli)
payment.register_commands(cli)
expense.register_commands(cli)
ledger.register_commands(cli)
audit.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
