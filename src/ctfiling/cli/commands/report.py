"""Return figures and export commands."""

import csv
import re
from pathlib import Path

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount
from ctfiling.cli.session_resolution import load_session_or_exit
from ctfiling.domain.derivation import as_rows
from ctfiling.domain.errors import DomainError
from ctfiling.domain.export import export_session


@click.group()
def report_group():
    """Show and export the corporate tax return."""
    pass


@report_group.command("show")
@click.option("--section", help="Only this section (e.g., 'Tax Summary')")
@click.pass_context
def show(ctx, section: str | None):
    """Show the derived return figures."""
    session = load_session_or_exit(ctx)
    try:
        values = session.figures()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if session.relief_claimed:
        click.echo("Small Business Relief elected: figures are reported as 0.")
        click.echo(f"Actual operating revenue: {format_amount(values.actual_operating_revenue)}")

    current = None
    for row_section, label, amount in as_rows(values):
        if section is not None and row_section.lower() != section.lower():
            continue
        if row_section != current:
            click.echo(f"\n{row_section}")
            current = row_section
        click.echo(f"  {label:<60} {format_amount(amount):>18}")


@report_group.command("export")
@click.argument("directory", type=click.Path(file_okay=False))
@click.pass_context
def export(ctx, directory: str):
    """Write every report sheet of the session as CSV files into DIRECTORY."""
    session = load_session_or_exit(ctx)
    sheets = export_session(session)
    if not sheets:
        click.echo("Nothing to export.")
        return

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = re.sub(r"[^\w.-]+", "_", session.company_name or session.name)

    for name, rows in sheets.items():
        path = out_dir / f"{prefix}_{name}.csv"
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(
                {key: "" if value is None else value for key, value in row.items()} for row in rows
            )
        click.echo(f"  {path} ({len(rows)} rows)")
    click.echo(f"Exported {len(sheets)} sheet(s) to {out_dir}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
