"""Filing workflow stages and transitions."""

from enum import IntEnum
from typing import TYPE_CHECKING

import structlog

from ctfiling.domain.entities import TransitionResult
from ctfiling.domain.errors import WorkflowError, stage_required

if TYPE_CHECKING:
    from ctfiling.domain.session import FilingSession

logger = structlog.get_logger(__name__)


class WorkflowStage(IntEnum):
    REVIEW = 1
    SUMMARIZE = 2
    VAT_DOCS = 3
    OPENING_BALANCES = 4
    ADJUST_TRIAL_BALANCE = 5
    PROFIT_LOSS = 6
    BALANCE_SHEET = 7
    QUESTIONNAIRE = 8
    FINAL_REPORT = 9

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]


STAGE_LABELS = {
    WorkflowStage.REVIEW: "Review Categories",
    WorkflowStage.SUMMARIZE: "Summarization",
    WorkflowStage.VAT_DOCS: "VAT Documents",
    WorkflowStage.OPENING_BALANCES: "Opening Balances",
    WorkflowStage.ADJUST_TRIAL_BALANCE: "Adjust Trial Balance",
    WorkflowStage.PROFIT_LOSS: "Profit & Loss",
    WorkflowStage.BALANCE_SHEET: "Balance Sheet",
    WorkflowStage.QUESTIONNAIRE: "Tax Return Questionnaire",
    WorkflowStage.FINAL_REPORT: "Final Report",
}


class WorkflowService:
    """Moves one filing session through the stages.

    Transitions never raise for a failed gate: they return a
    TransitionResult with ``allowed=False`` and leave the session untouched.
    """

    def __init__(self, session: "FilingSession"):
        """Initialize workflow service.

        Args:
            session: The filing session to drive
        """
        self.session = session

    @property
    def stage(self) -> WorkflowStage:
        return self.session.stage

    def _blocked(self, reason: str) -> TransitionResult:
        logger.info("transition_blocked", stage=self.stage.name, reason=reason)
        return TransitionResult(allowed=False, stage=int(self.stage), reason=reason)

    def _move(self, target: WorkflowStage, action: str) -> TransitionResult:
        source = self.stage
        self.session.stage = target
        if target == WorkflowStage.SUMMARIZE:
            self.session.reset_vat_route()
        self.session.record(action, f"{source.label} -> {target.label}")
        logger.info("stage_changed", source=source.name, target=target.name)
        return TransitionResult(allowed=True, stage=int(target))

    def advance(self) -> TransitionResult:
        """Move to the next stage if the current stage's gate passes."""
        session = self.session
        stage = self.stage

        if stage == WorkflowStage.REVIEW:
            return self._move(WorkflowStage.SUMMARIZE, "confirm_categories")

        if stage == WorkflowStage.SUMMARIZE:
            if session.vat_route is None:
                return self._blocked(f"Answer the VAT question first: {session.pending_vat_question}")
            target = WorkflowStage.VAT_DOCS if session.vat_route else WorkflowStage.OPENING_BALANCES
            return self._move(target, "advance")

        if stage == WorkflowStage.VAT_DOCS:
            session.apply_extracted_share_capital()
            return self._move(WorkflowStage.OPENING_BALANCES, "advance")

        if stage == WorkflowStage.OPENING_BALANCES:
            session.build_trial_balance()
            return self._move(WorkflowStage.ADJUST_TRIAL_BALANCE, "advance")

        if stage == WorkflowStage.ADJUST_TRIAL_BALANCE:
            trial_balance = session.trial_balance
            if trial_balance is None:
                return self._blocked("Trial balance has not been built")
            if not trial_balance.is_balanced:
                return self._blocked(
                    f"Trial balance is not balanced (difference {trial_balance.difference:,.2f})"
                )
            return self._move(WorkflowStage.PROFIT_LOSS, "advance")

        if stage == WorkflowStage.PROFIT_LOSS:
            return self._move(WorkflowStage.BALANCE_SHEET, "advance")

        if stage == WorkflowStage.BALANCE_SHEET:
            session.prefill_questionnaire_revenue()
            return self._move(WorkflowStage.QUESTIONNAIRE, "advance")

        if stage == WorkflowStage.QUESTIONNAIRE:
            missing = session.questionnaire.unanswered()
            if missing:
                ids = ", ".join(str(q.id) for q in missing)
                return self._blocked(f"{len(missing)} question(s) unanswered: {ids}")
            return self._move(WorkflowStage.FINAL_REPORT, "advance")

        return self._blocked("The final report is the last stage")

    def back(self) -> TransitionResult:
        """Return to the stage visited before the current one."""
        stage = self.stage
        if stage == WorkflowStage.REVIEW:
            return self._blocked("Already at the first stage")
        if stage == WorkflowStage.OPENING_BALANCES:
            target = (
                WorkflowStage.VAT_DOCS if self.session.vat_route else WorkflowStage.SUMMARIZE
            )
        else:
            target = WorkflowStage(stage - 1)
        return self._move(target, "back")

    def answer_vat_question(self, answer: bool) -> TransitionResult:
        """Answer the pending VAT availability question.

        "Yes" to either question routes to the VAT documents stage; "No" to
        both skips straight to opening balances. A "No" to the first question
        leaves the session at Summarization with the second question pending.

        Raises:
            WorkflowError: If the session is not at the Summarization stage
        """
        if self.stage != WorkflowStage.SUMMARIZE:
            raise WorkflowError(
                stage_required("answer VAT questions", WorkflowStage.SUMMARIZE.label)
            )
        question = self.session.pending_vat_question
        self.session.vat_answers.append(bool(answer))
        self.session.record("answer_vat_question", f"{question} {'Yes' if answer else 'No'}")

        if answer:
            self.session.vat_route = True
            return self._move(WorkflowStage.VAT_DOCS, "advance")
        if self.session.pending_vat_question is None:
            self.session.vat_route = False
            return self._move(WorkflowStage.OPENING_BALANCES, "advance")
        return TransitionResult(
            allowed=False,
            stage=int(self.stage),
            reason=f"Next question: {self.session.pending_vat_question}",
        )
