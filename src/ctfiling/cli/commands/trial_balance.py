"""Trial balance adjustment commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount, truncate
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.entities import BreakdownEntry
from ctfiling.domain.errors import DomainError, WorkflowError, trial_balance_not_built
from ctfiling.utils.amount_parser import to_amount


def parse_note_entry(value: str) -> BreakdownEntry:
    """Parse a working note line given as DESCRIPTION:DEBIT:CREDIT.

    The description may itself contain colons; the last two fields are the
    amounts. Malformed amounts count as zero.
    """
    parts = value.rsplit(":", 2)
    if len(parts) != 3:
        raise click.BadParameter(f"'{value}' is not DESCRIPTION:DEBIT:CREDIT")
    description, debit, credit = parts
    return BreakdownEntry(description=description.strip(), debit=to_amount(debit), credit=to_amount(credit))


@click.group()
def tb_group():
    """Review and adjust the trial balance."""
    pass


@tb_group.command("show")
@click.pass_context
def show(ctx):
    """Show the trial balance."""
    session = load_session_or_exit(ctx)
    trial_balance = session.trial_balance
    if trial_balance is None:
        click.echo(f"Error: {trial_balance_not_built()}", err=True)
        ctx.exit(1)

    click.echo(f"\n{'Account':<50} {'Debit':>16} {'Credit':>16}")
    click.echo("-" * 84)
    for entry in trial_balance.entries():
        if entry.account == trial_balance.totals.account:
            click.echo("-" * 84)
        marker = " *" if trial_balance.has_breakdown(entry.account) else ""
        click.echo(
            f"{truncate(entry.account + marker, 50):<50} {format_amount(entry.debit):>16} {format_amount(entry.credit):>16}"
        )

    if trial_balance.is_balanced:
        click.echo("\nBalanced")
    else:
        click.echo(f"\nNot balanced: difference {format_amount(trial_balance.difference)}")


@tb_group.command("set")
@click.argument("account")
@click.argument("field", type=click.Choice(["debit", "credit"], case_sensitive=False))
@click.argument("value")
@click.pass_context
def set_cell(ctx, account: str, field: str, value: str):
    """Overwrite an account's debit or credit (adds the account if missing).

    Accounts with a working note are computed from it; use 'tb note' for those.
    """
    session = load_session_or_exit(ctx)
    try:
        entry = session.set_trial_balance_cell(account, field.lower(), value)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{entry.account}: debit {format_amount(entry.debit)}, credit {format_amount(entry.credit)}")


@tb_group.command("note")
@click.argument("account")
@click.option(
    "--entry",
    "entries",
    multiple=True,
    help="Working note line as DESCRIPTION:DEBIT:CREDIT (repeatable)",
)
@click.pass_context
def note(ctx, account: str, entries: tuple[str, ...]):
    """Save a working note for an account; its totals replace the account's figures.

    Saving without any --entry removes the working note.

    Example:
        ctfiling tb note "Accrued Expenses" --entry "Audit fee:0:5000" --entry "Rent:0:12000"
    """
    lines = [parse_note_entry(e) for e in entries]
    session = load_session_or_exit(ctx)
    try:
        kept = session.save_working_note(account, lines)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not kept:
        click.echo(f"Removed working note for '{account}'")
        return
    entry = session.trial_balance.get(account)
    click.echo(
        f"Saved {len(kept)} working note line(s) for '{entry.account}': "
        f"debit {format_amount(entry.debit)}, credit {format_amount(entry.credit)}"
    )


@tb_group.command("show-note")
@click.argument("account")
@click.pass_context
def show_note(ctx, account: str):
    """Show an account's working note."""
    session = load_session_or_exit(ctx)
    if session.trial_balance is None:
        handle_domain_error(ctx, WorkflowError(trial_balance_not_built()))
    lines = session.trial_balance.breakdown(account)
    if not lines:
        click.echo(f"No working note for '{account}'.")
        return
    for line in lines:
        click.echo(f"  {truncate(line.description, 46):<46} {format_amount(line.debit):>16} {format_amount(line.credit):>16}")


@tb_group.command("add-account")
@click.argument("name")
@click.pass_context
def add_account(ctx, name: str):
    """Add an empty account to the trial balance."""
    session = load_session_or_exit(ctx)
    try:
        added = session.add_trial_balance_account(name)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if added:
        click.echo(f"Added account '{name.strip()}'")
    else:
        click.echo(f"Account '{name}' already exists or is not a valid name")


def register_commands(cli):
    """Register trial balance commands with main CLI."""
    cli.add_command(tb_group, name="tb")
