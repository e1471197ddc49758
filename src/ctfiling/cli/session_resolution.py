"""CLI helpers for loading and saving the active filing session."""

from __future__ import annotations

import click

from ctfiling.domain.errors import session_not_found
from ctfiling.domain.session import FilingSession


def load_session_or_exit(ctx: click.Context) -> FilingSession:
    """Load the session chosen with --session / CTFILING_SESSION, or exit with a CLI error.

    Without an explicit choice the most recently created session is used.
    """
    db = ctx.obj["db"]
    session_id = ctx.obj.get("session_id")

    if session_id is None:
        sessions = db.list_sessions()
        if not sessions:
            click.echo("Error: No filing session found. Create one with 'session create'.", err=True)
            ctx.exit(1)
        return sessions[-1]

    session = db.get_session(session_id)
    if session is None:
        click.echo(f"Error: {session_not_found(session_id)}", err=True)
        ctx.exit(1)
    return session


def save_session(ctx: click.Context, session: FilingSession) -> None:
    """Persist the session after a command changed it."""
    ctx.obj["db"].save_session(session)
