"""Chart of accounts commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.category import resolve_category_path
from ctfiling.domain.chart_of_accounts import CHART_OF_ACCOUNTS
from ctfiling.domain.entities import UNCATEGORIZED
from ctfiling.domain.errors import DomainError


@click.group()
def category_group():
    """Browse the chart of accounts."""
    pass


@category_group.command("list")
@click.option("--main", help="Only this main category (e.g., Expenses)")
@click.pass_context
def list_categories(ctx, main: str | None):
    """List the chart of accounts in tree format."""
    if main is not None and main not in CHART_OF_ACCOUNTS:
        click.echo(f"Error: Main category must be one of: {', '.join(CHART_OF_ACCOUNTS)}", err=True)
        ctx.exit(1)

    for name, section in CHART_OF_ACCOUNTS.items():
        if main is not None and name != main:
            continue
        click.echo(name)
        if isinstance(section, dict):
            for sub_group, accounts in section.items():
                click.echo(f"  {sub_group}")
                for account in accounts:
                    click.echo(f"    {account}")
        else:
            for account in section:
                click.echo(f"  {account}")


@category_group.command("resolve")
@click.argument("text")
def resolve(text: str):
    """Show the chart path a category text resolves to."""
    resolved = resolve_category_path(text)
    if resolved == UNCATEGORIZED:
        click.echo(f"'{text}' does not match any category ({UNCATEGORIZED})")
    else:
        click.echo(resolved)


@category_group.command("add")
@click.argument("main")
@click.argument("name")
@click.pass_context
def add_category(ctx, main: str, name: str):
    """Add a custom category to the active session."""
    session = load_session_or_exit(ctx)
    try:
        path = session.add_custom_category(main, name)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added custom category '{path}'")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
