"""CLI error handling helpers."""

import click
import structlog

from ctfiling.domain.entities import TransitionResult
from ctfiling.domain.errors import DomainError

logger = structlog.get_logger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    logger.debug("command_failed", command=ctx.info_name, error=type(error).__name__)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_blocked_transition(ctx: click.Context, result: TransitionResult) -> None:
    """Render a refused workflow transition and exit with failure.

    The session is not saved; a blocked transition changes nothing.
    """
    click.echo(f"Error: {result.reason}", err=True)
    ctx.exit(1)
