"""Main CLI entry point."""

import click

from ctfiling.config.logging import configure_logging
from ctfiling.database.factories import create_sqlite_database

# Import and register all commands at module level
from ctfiling.cli.commands import (
    session,
    import_cmd,
    ledger,
    category,
    opening,
    vat,
    trial_balance,
    questionnaire,
    workflow,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CTFILING_DB_PATH environment variable)",
    envvar="CTFILING_DB_PATH",
)
@click.option(
    "--session",
    "session_id",
    type=int,
    help="Filing session ID (defaults to the latest session)",
    envvar="CTFILING_SESSION",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for diagnostics on stderr",
    envvar="CTFILING_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, session_id: int | None, log_level: str | None):
    """ctfiling - Corporate tax filing workflow.

    Turn categorized bank statement transactions into a reconciled trial
    balance and the figures of a corporate tax return.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level)
    ctx.obj["session_id"] = session_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
session.register_commands(cli)
import_cmd.register_commands(cli)
ledger.register_commands(cli)
category.register_commands(cli)
opening.register_commands(cli)
vat.register_commands(cli)
trial_balance.register_commands(cli)
questionnaire.register_commands(cli)
workflow.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
