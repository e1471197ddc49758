"""VAT document commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount, truncate
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.errors import DomainError
from ctfiling.domain.vat import vat_totals
from ctfiling.domain.workflow import WorkflowService, WorkflowStage
from ctfiling.integrations.files import JsonDocumentExtractor


@click.group()
def vat_group():
    """Route through and extract VAT return documents."""
    pass


@vat_group.command("answer")
@click.argument("answer", type=click.Choice(["yes", "no"], case_sensitive=False))
@click.pass_context
def answer(ctx, answer: str):
    """Answer the pending VAT availability question."""
    session = load_session_or_exit(ctx)
    question = session.pending_vat_question
    try:
        result = WorkflowService(session).answer_vat_question(answer.lower() == "yes")
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"{question} {answer.capitalize()}")
    if result.allowed:
        click.echo(f"Moved to stage {result.stage}: {WorkflowStage(result.stage).label}")
    else:
        click.echo(result.reason)


@vat_group.command("extract")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_context
def extract(ctx, files: tuple[str, ...]):
    """Extract sales and expense totals from VAT 201 returns (JSON)."""
    session = load_session_or_exit(ctx)
    try:
        results = session.extract_vat_documents(JsonDocumentExtractor(), files)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Extracted {len(results)} VAT return(s)")


@vat_group.command("list")
@click.pass_context
def list_vat(ctx):
    """Show extracted VAT return totals."""
    session = load_session_or_exit(ctx)
    if not session.vat_results:
        click.echo("No VAT returns extracted.")
        return

    click.echo(f"\n{'File':<30} {'Period':<25} {'Sales (8)':>16} {'Expenses (11)':>16}")
    click.echo("-" * 90)
    for r in session.vat_results:
        period = f"{r.period_from} - {r.period_to}" if r.period_from and r.period_to else "N/A"
        click.echo(
            f"{truncate(r.file_name, 30):<30} {period:<25} {format_amount(r.sales_total):>16} "
            f"{format_amount(r.expenses_total):>16}"
        )
    sales, expenses = vat_totals(session.vat_results)
    click.echo("-" * 90)
    click.echo(f"{'Total':<56} {format_amount(sales):>16} {format_amount(expenses):>16}")


def register_commands(cli):
    """Register VAT commands with main CLI."""
    cli.add_command(vat_group, name="vat")
