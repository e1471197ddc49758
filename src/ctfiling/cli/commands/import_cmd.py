"""Bank statement import command."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.errors import DomainError
from ctfiling.domain.statement_import import read_statement_csv
from ctfiling.utils.amount_parser import parse_amount


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--opening", help="Reported opening balance (inferred from the Balance column if omitted)")
@click.option("--closing", help="Reported closing balance (inferred from the Balance column if omitted)")
@click.pass_context
def import_csv(ctx, csv_file: str, opening: str | None, closing: str | None):
    """Import bank statement transactions from a CSV file.

    Columns: Date, Description, Debit, Credit, and optionally Balance,
    Category and Currency. Categories are resolved against the chart of
    accounts; anything unresolvable is left UNCATEGORIZED.
    """
    session = load_session_or_exit(ctx)

    try:
        result = read_statement_csv(
            csv_file,
            opening_balance=parse_amount(opening) if opening else None,
            closing_balance=parse_amount(closing) if closing else None,
        )
        added = session.import_statement(result.file_name, result.transactions, result.summary)
        save_session(ctx, session)
    except (DomainError, ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {added} transactions from {result.file_name}")
    click.echo(f"  Uncategorized: {session.ledger.uncategorized_count()}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
