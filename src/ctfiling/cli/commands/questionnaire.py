"""Tax return questionnaire commands."""

import click

from ctfiling.cli.error_handling import handle_domain_error
from ctfiling.cli.formatting import format_amount
from ctfiling.cli.session_resolution import load_session_or_exit, save_session
from ctfiling.domain.errors import DomainError
from ctfiling.domain.questionnaire import CT_QUESTIONS, RELIEF_QUESTION_ID


@click.group()
def questionnaire_group():
    """Answer the corporate tax return questions."""
    pass


@questionnaire_group.command("list")
@click.pass_context
def list_questions(ctx):
    """List the questions and current answers."""
    session = load_session_or_exit(ctx)
    questionnaire = session.questionnaire

    for question in CT_QUESTIONS:
        click.echo(f"{question.id:>2}. {question.text}")
        click.echo(f"    Answer: {questionnaire.answers.get(question.id) or '-'}")

    click.echo(f"\nCurrent period revenue: {format_amount(questionnaire.current_revenue)}")
    click.echo(f"Previous period revenue: {format_amount(questionnaire.previous_revenue)}")
    if questionnaire.relief_eligible:
        click.echo("Small Business Relief applicable (revenue below AED 3,000,000)")
    else:
        click.echo(
            f"Standard tax calculation applies; question {RELIEF_QUESTION_ID} is fixed to 'No'"
        )
    if questionnaire.relief_claimed:
        click.echo("Small Business Relief elected: all return figures will be reported as 0.")


@questionnaire_group.command("answer")
@click.argument("question_id", type=int)
@click.argument("value")
@click.pass_context
def answer(ctx, question_id: int, value: str):
    """Answer a question (Yes/No; question 11 takes the employee count)."""
    session = load_session_or_exit(ctx)
    try:
        stored = session.answer_question(question_id, value)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Question {question_id}: {stored}")


@questionnaire_group.command("revenue")
@click.option("--current", help="Revenue of the current tax period")
@click.option("--previous", help="Revenue of the previous tax period")
@click.pass_context
def revenue(ctx, current: str | None, previous: str | None):
    """Enter revenue used for the Small Business Relief check."""
    if current is None and previous is None:
        click.echo("Error: Provide --current and/or --previous", err=True)
        ctx.exit(1)

    session = load_session_or_exit(ctx)
    try:
        session.set_revenue(current, previous)
        save_session(ctx, session)
    except DomainError as e:
        handle_domain_error(ctx, e)

    questionnaire = session.questionnaire
    click.echo(f"Total revenue: {format_amount(questionnaire.total_revenue)}")
    click.echo(
        "Small Business Relief applicable"
        if questionnaire.relief_eligible
        else "Standard tax calculation applies"
    )


def register_commands(cli):
    """Register questionnaire commands with main CLI."""
    cli.add_command(questionnaire_group, name="questionnaire")
