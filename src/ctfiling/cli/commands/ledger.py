"""Transaction ledger commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount, truncate
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.category import child_category
from ctfiling.domain.entities import UNCATEGORIZED, ZERO
from ctfiling.domain.errors import DomainError
from ctfiling.domain.transaction import ALL
from ctfiling.integrations.files import KeywordCategorizer
from ctfiling.utils.date_parser import format_date


@click.group()
def ledger_group():
    """Review and categorize statement transactions."""
    pass


@ledger_group.command("list")
@click.option("--search", default="", help="Description contains this text")
@click.option("--category", help="Category name or path")
@click.option("--file", "source_file", help="Statement file name")
@click.option("--uncategorized", is_flag=True, help="Only uncategorized transactions")
@click.pass_context
def list_transactions(ctx, search: str, category: str | None, source_file: str | None, uncategorized: bool):
    """List transactions with their ledger index."""
    session = load_session_or_exit(ctx)

    if uncategorized:
        category = UNCATEGORIZED
    rows = session.ledger.filter(
        search=search,
        category=category or ALL,
        source_file=source_file or ALL,
    )

    if not rows:
        click.echo("No transactions found.")
        return

    click.echo(
        f"\n{'#':<5} {'Date':<12} {'Description':<40} {'Debit':>14} {'Credit':>14}  Category"
    )
    click.echo("-" * 120)
    for index, txn in rows:
        click.echo(
            f"{index:<5} {format_date(txn.date):<12} {truncate(txn.description, 40):<40} "
            f"{format_amount(txn.debit) if txn.debit else '':>14} "
            f"{format_amount(txn.credit) if txn.credit else '':>14}  {child_category(txn.category)}"
        )
    click.echo(f"\n{len(rows)} of {len(session.ledger)} transactions")


@ledger_group.command("categorize")
@click.argument("indices", nargs=-1, type=int, required=True)
@click.argument("category")
@click.pass_context
def categorize(ctx, indices: tuple[int, ...], category: str):
    """Set the category of one or more transactions.

    Examples:
        ctfiling ledger categorize 3 "Bank Charges"
        ctfiling ledger categorize 1 2 5 "Expenses | OtherExpense | Fuel Expenses"
    """
    session = load_session_or_exit(ctx)
    try:
        changed = session.categorize(indices, category)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Categorized {changed} transaction(s)")


@ledger_group.command("replace")
@click.argument("text")
@click.argument("category")
@click.pass_context
def find_and_replace(ctx, text: str, category: str):
    """Categorize every transaction whose description contains TEXT."""
    session = load_session_or_exit(ctx)
    try:
        changed = session.find_and_replace(text, category)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Categorized {changed} transaction(s) matching '{text}'")


@ledger_group.command("delete")
@click.argument("index", type=int)
@click.pass_context
def delete_transaction(ctx, index: int):
    """Delete a transaction by ledger index."""
    session = load_session_or_exit(ctx)
    try:
        removed = session.delete_transaction(index)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {index}: {removed.description}")


@ledger_group.command("auto")
@click.argument("rules_file", type=click.Path(exists=True))
@click.pass_context
def auto_categorize(ctx, rules_file: str):
    """Categorize transactions from a keyword rules file.

    RULES_FILE is a JSON object mapping description keywords to categories,
    e.g. {"ENOC": "Fuel Expenses", "SALARY": "Salaries & Wages"}.
    """
    session = load_session_or_exit(ctx)
    try:
        categorizer = KeywordCategorizer.from_file(rules_file)
        remaining = session.auto_categorize(categorizer)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Categorization complete: {remaining} transaction(s) still uncategorized")


@ledger_group.command("summary")
@click.option("--file", "source_file", help="Statement file name")
@click.pass_context
def summary(ctx, source_file: str | None):
    """Show debit and credit totals per category."""
    session = load_session_or_exit(ctx)
    items = session.category_summary(source_file)

    if not items:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'Category':<45} {'Debit':>16} {'Credit':>16}")
    click.echo("-" * 79)
    total_debit = ZERO
    total_credit = ZERO
    for item in items:
        click.echo(
            f"{truncate(item.category, 45):<45} {format_amount(item.debit):>16} {format_amount(item.credit):>16}"
        )
        total_debit += item.debit
        total_credit += item.credit
    click.echo("-" * 79)
    click.echo(f"{'Total':<45} {format_amount(total_debit):>16} {format_amount(total_credit):>16}")


@ledger_group.command("reconcile")
@click.option("--check", is_flag=True, help="Run the running balance check instead of the per-file table")
@click.option("--file", "source_file", help="Limit the balance check to one statement file")
@click.pass_context
def reconcile(ctx, check: bool, source_file: str | None):
    """Check every statement's closing balance against its transactions.

    With --check, the transactions of all statements combined (or of --file)
    are run against the matching opening and closing balances.
    """
    session = load_session_or_exit(ctx)
    if check:
        result = session.balance_check(source_file)
        if result.is_valid:
            click.echo(f"Balance check passed for {result.file_name}")
            return
        click.echo(
            f"Balance check failed for {result.file_name}: calculated "
            f"{format_amount(result.calculated_closing)}, reported "
            f"{format_amount(result.closing_balance)} (difference {format_amount(result.diff)})",
            err=True,
        )
        ctx.exit(1)

    results = session.reconciliation()

    if not results:
        click.echo("No statements imported.")
        return

    click.echo(
        f"\n{'File':<30} {'Opening':>14} {'Debit':>14} {'Credit':>14} {'Calculated':>14} {'Reported':>14}  Status"
    )
    click.echo("-" * 120)
    for r in results:
        status = "OK" if r.is_valid else f"MISMATCH ({format_amount(r.diff)})"
        click.echo(
            f"{truncate(r.file_name, 30):<30} {format_amount(r.opening_balance):>14} "
            f"{format_amount(r.total_debit):>14} {format_amount(r.total_credit):>14} "
            f"{format_amount(r.calculated_closing):>14} {format_amount(r.closing_balance):>14}  {status}"
        )


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
