"""Report domain failures from CLI commands."""

import logging

import click

from estateledger.domain.errors import AuthorizationError, DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print the error on stderr and exit with status 1.

    Authorization failures are logged at WARNING so refused actions leave
    a trace; everything else is a user mistake and only logged at DEBUG.
    """
    command = ctx.command_path
    if isinstance(error, AuthorizationError):
        logger.warning("%s refused: %s", command, error)
    else:
        logger.debug("%s failed (%s): %s", command, type(error).__name__, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
