"""Filing session management commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount
from ctfiling.cli.session_resolution import load_session_or_exit
from ctfiling.domain.errors import DomainError
from ctfiling.domain.session import FilingSession
from ctfiling.utils.amount_parser import parse_amount


@click.group()
def session_group():
    """Manage filing sessions."""
    pass


@session_group.command("create")
@click.argument("name")
@click.option("--company", help="Company name")
@click.option("--share-capital", help="Share capital from the company profile (e.g., 100000)")
@click.pass_context
def create_session(ctx, name: str, company: str | None, share_capital: str | None):
    """Create a new filing session."""
    db = ctx.obj["db"]
    try:
        capital = parse_amount(share_capital) if share_capital else None
        session = FilingSession(name=name, company_name=company, share_capital=capital)
        session.record("create_session", session.name)
        session_id = db.create_session(session)
        click.echo(f"Created filing session '{session.name}' (ID: {session_id})")
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)


@session_group.command("list")
@click.pass_context
def list_sessions(ctx):
    """List all filing sessions."""
    db = ctx.obj["db"]
    sessions = db.list_sessions()

    if not sessions:
        click.echo("No filing sessions found.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<25} {'Company':<25} {'Stage':<25}")
    click.echo("-" * 80)
    for s in sessions:
        click.echo(
            f"{s.id:<5} {s.name[:25]:<25} {(s.company_name or '-')[:25]:<25} "
            f"{int(s.stage)}. {s.stage.label}"
        )


@session_group.command("show")
@click.option("--log", "show_log", is_flag=True, help="Show the mutation log")
@click.pass_context
def show_session(ctx, show_log: bool):
    """Show the active filing session."""
    session = load_session_or_exit(ctx)

    click.echo(f"\nSession {session.id}: {session.name}")
    click.echo(f"  Company: {session.company_name or '-'}")
    click.echo(f"  Share capital: {format_amount(session.share_capital)}")
    click.echo(f"  Stage: {int(session.stage)}. {session.stage.label}")
    click.echo(f"  Transactions: {len(session.ledger)} ({session.ledger.uncategorized_count()} uncategorized)")
    click.echo(f"  Statements: {', '.join(session.ledger.source_files()) or '-'}")
    if session.trial_balance is not None:
        status = "balanced" if session.trial_balance.is_balanced else "not balanced"
        click.echo(f"  Trial balance: {len(session.trial_balance)} accounts, {status}")

    if show_log:
        click.echo("\nMutation log:")
        for entry in session.mutation_log:
            click.echo(f"  [{entry.stage}] {entry.action}: {entry.detail}")


@session_group.command("delete")
@click.argument("session_id", type=int)
@click.option("--force", is_flag=True, help="Delete without confirmation")
@click.pass_context
def delete_session(ctx, session_id: int, force: bool):
    """Delete a filing session."""
    db = ctx.obj["db"]
    if not force and not click.confirm(f"Delete filing session {session_id}?"):
        click.echo("Cancelled.")
        return
    try:
        db.delete_session(session_id)
        click.echo(f"Deleted filing session {session_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register session commands with main CLI."""
    cli.add_command(session_group, name="session")
