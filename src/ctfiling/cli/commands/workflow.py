"""Workflow navigation commands."""

import click

from ctfiling.cli.error_handling import handle_blocked_transition
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.workflow import WorkflowService, WorkflowStage


@click.group()
def workflow_group():
    """Move the filing session between stages."""
    pass


@workflow_group.command("status")
@click.pass_context
def status(ctx):
    """Show every stage and where the session is."""
    session = load_session_or_exit(ctx)
    for stage in WorkflowStage:
        marker = ">" if stage == session.stage else " "
        click.echo(f"{marker} {int(stage)}. {stage.label}")
    if session.pending_vat_question and session.stage == WorkflowStage.SUMMARIZE:
        click.echo(f"\nPending question: {session.pending_vat_question} (answer with 'vat answer')")


def _report(ctx, session, result) -> None:
    if not result.allowed:
        handle_blocked_transition(ctx, result)
    save_session(ctx, session)
    click.echo(f"Moved to stage {result.stage}: {WorkflowStage(result.stage).label}")


@workflow_group.command("next")
@click.pass_context
def next_stage(ctx):
    """Advance to the next stage if its requirements are met."""
    session = load_session_or_exit(ctx)
    _report(ctx, session, WorkflowService(session).advance())


@workflow_group.command("back")
@click.pass_context
def back(ctx):
    """Return to the previous stage."""
    session = load_session_or_exit(ctx)
    _report(ctx, session, WorkflowService(session).back())


def register_commands(cli):
    """Register workflow commands with main CLI."""
    cli.add_command(workflow_group, name="workflow")
