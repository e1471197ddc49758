"""Opening balance commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.errors import DomainError
from ctfiling.integrations.files import JsonDocumentExtractor


@click.group()
def opening_group():
    """Enter opening balances of the filing period."""
    pass


@opening_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include accounts with zero balances")
@click.pass_context
def list_opening(ctx, show_all: bool):
    """List opening balances by section."""
    session = load_session_or_exit(ctx)
    balances = session.opening_balances

    for section in balances.categories:
        click.echo(f"\n{section.category}")
        for account in section.accounts:
            if not show_all and not account.debit and not account.credit:
                continue
            marker = " (new)" if account.is_new else ""
            click.echo(
                f"  {account.name + marker:<50} {format_amount(account.debit):>16} {format_amount(account.credit):>16}"
            )

    debit, credit = balances.totals()
    click.echo(f"\n{'Total':<52} {format_amount(debit):>16} {format_amount(credit):>16}")


@opening_group.command("set")
@click.argument("account")
@click.option("--debit", help="Opening debit amount")
@click.option("--credit", help="Opening credit amount")
@click.pass_context
def set_opening(ctx, account: str, debit: str | None, credit: str | None):
    """Set an account's opening debit and/or credit."""
    if debit is None and credit is None:
        click.echo("Error: Provide --debit and/or --credit", err=True)
        ctx.exit(1)

    session = load_session_or_exit(ctx)
    try:
        if debit is not None:
            updated = session.set_opening_balance(account, "debit", debit)
        if credit is not None:
            updated = session.set_opening_balance(account, "credit", credit)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"{updated.name}: debit {format_amount(updated.debit)}, credit {format_amount(updated.credit)}"
    )


@opening_group.command("add")
@click.argument("category", type=click.Choice(["Assets", "Liabilities", "Equity"], case_sensitive=False))
@click.argument("name")
@click.pass_context
def add_opening(ctx, category: str, name: str):
    """Add an account to an opening balance section."""
    session = load_session_or_exit(ctx)
    try:
        account = session.add_opening_account(category, name)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added opening balance account '{account.name}' to {category}")


@opening_group.command("extract")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_context
def extract_opening(ctx, files: tuple[str, ...]):
    """Merge opening balances extracted from prior-period documents (JSON)."""
    session = load_session_or_exit(ctx)
    try:
        applied = session.extract_opening_balances(JsonDocumentExtractor(), files)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Applied {applied} extracted balance(s)")


def register_commands(cli):
    """Register opening balance commands with main CLI."""
    cli.add_command(opening_group, name="opening")
