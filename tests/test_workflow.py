"""Tests for workflow stage transitions."""

from decimal import Decimal

import pytest

from ctfiling.domain.errors import WorkflowError
from ctfiling.domain.questionnaire import CT_QUESTIONS
from ctfiling.domain.workflow import WorkflowService, WorkflowStage

SHARE_CAPITAL = "Share Capital / Owner’s Equity"


def _to_opening_balances(session):
    workflow = WorkflowService(session)
    workflow.advance()
    workflow.answer_vat_question(False)
    workflow.answer_vat_question(False)
    assert session.stage == WorkflowStage.OPENING_BALANCES
    return workflow


def _to_adjust(session):
    workflow = _to_opening_balances(session)
    session.set_opening_balance(SHARE_CAPITAL, "credit", "10000")
    assert workflow.advance().allowed
    return workflow


def test_stage_labels():
    assert WorkflowStage.REVIEW.label == "Review Categories"
    assert WorkflowStage(9).label == "Final Report"
    assert len(WorkflowStage) == 9


def test_review_advances_to_summarize(sample_session):
    result = WorkflowService(sample_session).advance()

    assert result.allowed
    assert result.stage == WorkflowStage.SUMMARIZE
    assert sample_session.mutation_log[-1].action == "confirm_categories"


def test_summarize_blocked_until_vat_question_answered(sample_session):
    workflow = WorkflowService(sample_session)
    workflow.advance()

    result = workflow.advance()

    assert not result.allowed
    assert result.stage == WorkflowStage.SUMMARIZE
    assert "VAT 201 Certificates Available?" in result.reason


def test_vat_yes_routes_to_vat_documents(sample_session):
    workflow = WorkflowService(sample_session)
    workflow.advance()

    result = workflow.answer_vat_question(True)

    assert result.allowed
    assert sample_session.stage == WorkflowStage.VAT_DOCS
    assert sample_session.vat_route is True


def test_vat_no_then_yes_routes_to_vat_documents(sample_session):
    workflow = WorkflowService(sample_session)
    workflow.advance()

    first = workflow.answer_vat_question(False)
    assert not first.allowed
    assert first.reason == "Next question: Sales/Purchase Ledgers Available?"
    assert sample_session.stage == WorkflowStage.SUMMARIZE

    workflow.answer_vat_question(True)
    assert sample_session.stage == WorkflowStage.VAT_DOCS


def test_vat_no_twice_skips_to_opening_balances(sample_session):
    _to_opening_balances(sample_session)

    assert sample_session.vat_route is False
    assert sample_session.vat_answers == [False, False]


def test_vat_answer_outside_summarize(sample_session):
    with pytest.raises(WorkflowError):
        WorkflowService(sample_session).answer_vat_question(True)


def test_back_from_opening_balances_follows_route(sample_session):
    workflow = _to_opening_balances(sample_session)

    result = workflow.back()

    assert result.stage == WorkflowStage.SUMMARIZE
    # Re-entering summarization asks the VAT questions again
    assert sample_session.vat_route is None
    assert sample_session.pending_vat_question == "VAT 201 Certificates Available?"

    workflow.answer_vat_question(True)
    workflow.advance()
    assert sample_session.stage == WorkflowStage.OPENING_BALANCES
    assert workflow.back().stage == WorkflowStage.VAT_DOCS


def test_back_at_first_stage_blocked(sample_session):
    result = WorkflowService(sample_session).back()

    assert not result.allowed
    assert result.stage == WorkflowStage.REVIEW


def test_vat_documents_carry_share_capital(sample_session):
    workflow = WorkflowService(sample_session)
    workflow.advance()
    workflow.answer_vat_question(True)
    sample_session.additional_details["share_capital"] = "10000"

    workflow.advance()

    _, account = sample_session.opening_balances.find_account(SHARE_CAPITAL)
    assert account.credit == Decimal("10000")


def test_opening_balances_builds_trial_balance(sample_session):
    _to_adjust(sample_session)

    trial_balance = sample_session.trial_balance
    assert sample_session.stage == WorkflowStage.ADJUST_TRIAL_BALANCE
    assert trial_balance.get("Bank Accounts").debit == Decimal("11750")
    assert trial_balance.is_balanced


def test_unbalanced_trial_balance_blocks(sample_session):
    workflow = _to_adjust(sample_session)
    sample_session.set_trial_balance_cell("Bank Charges", "debit", "150")

    result = workflow.advance()

    assert not result.allowed
    assert result.reason == "Trial balance is not balanced (difference 100.00)"
    assert sample_session.stage == WorkflowStage.ADJUST_TRIAL_BALANCE


def test_full_walk_to_final_report(sample_session):
    workflow = _to_adjust(sample_session)

    assert workflow.advance().stage == WorkflowStage.PROFIT_LOSS
    assert workflow.advance().stage == WorkflowStage.BALANCE_SHEET
    assert workflow.advance().stage == WorkflowStage.QUESTIONNAIRE
    assert sample_session.questionnaire.current_revenue == Decimal("5000")

    blocked = workflow.advance()
    assert not blocked.allowed
    assert blocked.reason.startswith("25 question(s) unanswered")

    for question in CT_QUESTIONS:
        if question.id == 11:
            sample_session.answer_question(11, "2")
        elif question.id == 6:
            sample_session.answer_question(6, "Yes")
        else:
            sample_session.answer_question(question.id, "No")

    result = workflow.advance()
    assert result.allowed
    assert sample_session.stage == WorkflowStage.FINAL_REPORT
    assert sample_session.relief_claimed
    assert sample_session.figures().net_profit == Decimal("0")
    assert sample_session.figures().actual_operating_revenue == Decimal("5000")

    last = workflow.advance()
    assert not last.allowed
    assert last.stage == WorkflowStage.FINAL_REPORT


def test_back_steps_one_stage(sample_session):
    workflow = _to_adjust(sample_session)
    workflow.advance()

    assert workflow.back().stage == WorkflowStage.ADJUST_TRIAL_BALANCE
    assert workflow.back().stage == WorkflowStage.OPENING_BALANCES


def test_transitions_are_logged(sample_session):
    workflow = WorkflowService(sample_session)
    workflow.advance()
    workflow.back()

    details = [m.detail for m in sample_session.mutation_log if m.action in ("confirm_categories", "back")]
    assert details == [
        "Review Categories -> Summarization",
        "Summarization -> Review Categories",
    ]
