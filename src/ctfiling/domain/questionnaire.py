"""Corporate tax return questionnaire and Small Business Relief eligibility."""

from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Optional

import structlog

from ctfiling.domain.entities import ZERO
from ctfiling.domain.errors import NotFoundError, ValidationError
from ctfiling.utils.amount_parser import to_amount

logger = structlog.get_logger(__name__)

RELIEF_QUESTION_ID = 6
EMPLOYEE_COUNT_QUESTION_ID = 11
RELIEF_REVENUE_CEILING = Decimal("3000000")
YES = "Yes"
NO = "No"


class Question(NamedTuple):
    id: int
    text: str


CT_QUESTIONS = (
    Question(1, "Is the Taxable Person a partner in one or more Unincorporated Partnerships?"),
    Question(2, "Is the Tax Return being completed by a Government Entity, Government Controlled Entity, Extractive Business or Non-Extractive Natural Resource Business?"),
    Question(3, "Is the Taxable Person a member of a Multinational Enterprise Group?"),
    Question(4, "Is the Taxable Person incorporated or otherwise established or recognised under the laws of the UAE or under the laws of a Free Zone?"),
    Question(5, "Is the Taxable Person tax resident in a foreign jurisdiction under an applicable Double Taxation Agreement?"),
    Question(6, "Would the Taxable Person like to make an election for Small Business Relief?"),
    Question(7, "Did the Taxable Person transfer any assets or liabilities to a member of the same Qualifying Group during the Tax Period?"),
    Question(8, "Did the Taxable Person transfer a Business or an independent part of a Business during the Tax Period under which Business Restructuring Relief may apply?"),
    Question(9, "Does the Taxable Person have any Foreign Permanent Establishments?"),
    Question(10, "Have the Financial Statements been audited?"),
    Question(11, "Average number of employees during the Tax Period"),
    Question(12, "Does the Taxable Person account for any investments under the Equity Method of Accounting?"),
    Question(13, "Has the Taxable Person recognised any realised or unrealised gains or losses in the Financial Statements that will not subsequently be recognised in the Income Statement?"),
    Question(14, "Has the Taxable Person held any Qualifying Immovable Property, Qualifying Intangible Assets or Qualifying Financial Assets or Qualifying Financial Liabilities during the Tax Period?"),
    Question(15, "Has the Taxable Person incurred Net Interest Expenditure in the current Tax Period which together with any Net Interest Expenditure carried forward exceeds AED 12 million?"),
    Question(16, "Does the Taxable Person wish to deduct any brought forward Net Interest Expenditure in the current Tax Period?"),
    Question(17, "Were there any transactions with Related Parties in the current Tax Period?"),
    Question(18, "Were there any gains / losses realised in the current Tax Period in relation to assets/liabilities previously received from a Related Party at a non-arms length price?"),
    Question(19, "Were there any transactions with Connected Persons in the current Tax Period?"),
    Question(20, "Has the Taxable Person been an Investor in a Qualifying Investment Fund in the current Tax Period or any previous Tax Periods?"),
    Question(21, "Has the Taxable Person made an error in a prior Tax Period where the tax impact is AED 10,000 or less?"),
    Question(22, "Any other adjustments not captured above?"),
    Question(23, "Does the Taxable Person wish to claim Tax Losses from, or surrender Tax Losses to, another group entity?"),
    Question(24, "Does the Taxable Person wish to use any available Tax Credits?"),
    Question(25, "Have any estimated figures been included in the Corporate Tax Return?"),
)

_QUESTIONS_BY_ID = {q.id: q for q in CT_QUESTIONS}


def get_question(question_id: int) -> Question:
    """Get a question by id.

    Raises:
        NotFoundError: If no question has this id
    """
    try:
        return _QUESTIONS_BY_ID[question_id]
    except KeyError:
        raise NotFoundError(
            f"Question {question_id} not found (questions are numbered 1-{len(CT_QUESTIONS)})"
        ) from None


def normalize_yes_no(value: str) -> str:
    """Map a yes/no answer onto "Yes" or "No".

    Raises:
        ValidationError: If the value is not a yes/no answer
    """
    lowered = (value or "").strip().lower()
    if lowered in ("y", "yes"):
        return YES
    if lowered in ("n", "no"):
        return NO
    raise ValidationError(f"Answer must be Yes or No, got '{value}'")


class Questionnaire:
    """Answers to the fixed return questions plus the revenue figures."""

    def __init__(
        self,
        answers: Optional[Mapping[int, str]] = None,
        current_revenue: Optional[Decimal] = None,
        previous_revenue: Optional[Decimal] = None,
    ):
        self.answers: dict[int, str] = {int(k): v for k, v in (answers or {}).items()}
        self.current_revenue = current_revenue
        self.previous_revenue = previous_revenue

    def answer(self, question_id: int, value: str) -> str:
        """Record an answer.

        The employee count question takes free text; every other question
        takes Yes/No. The relief election is forced to "No" while the
        company is ineligible.

        Returns:
            The stored answer

        Raises:
            NotFoundError: If the question does not exist
            ValidationError: If a yes/no question gets another answer
        """
        get_question(question_id)
        if question_id == EMPLOYEE_COUNT_QUESTION_ID:
            stored = (value or "").strip()
            if not stored:
                raise ValidationError("Employee count cannot be empty")
        else:
            stored = normalize_yes_no(value)

        if question_id == RELIEF_QUESTION_ID and not self.relief_eligible:
            if stored == YES:
                logger.info("relief_election_refused", current=str(self.current_revenue))
            stored = NO

        self.answers[question_id] = stored
        return stored

    def set_revenue(self, current: Any = None, previous: Any = None) -> None:
        """Set current and/or previous period revenue. Malformed values become zero."""
        if current is not None:
            self.current_revenue = to_amount(current)
        if previous is not None:
            self.previous_revenue = to_amount(previous)
        self._enforce_eligibility()

    def prefill_revenue(self, actual_operating_revenue: Decimal) -> bool:
        """Seed current revenue from the derived figures when not yet entered.

        Returns:
            True if the current revenue was set
        """
        if self.current_revenue is not None:
            return False
        self.current_revenue = actual_operating_revenue
        self._enforce_eligibility()
        return True

    def _enforce_eligibility(self) -> None:
        if not self.relief_eligible and RELIEF_QUESTION_ID in self.answers:
            self.answers[RELIEF_QUESTION_ID] = NO

    @property
    def total_revenue(self) -> Decimal:
        return (self.current_revenue or ZERO) + (self.previous_revenue or ZERO)

    @property
    def relief_eligible(self) -> bool:
        """Revenue below the ceiling in both the current and the previous period."""
        return (
            (self.current_revenue or ZERO) < RELIEF_REVENUE_CEILING
            and (self.previous_revenue or ZERO) < RELIEF_REVENUE_CEILING
        )

    @property
    def relief_claimed(self) -> bool:
        return self.relief_eligible and self.answers.get(RELIEF_QUESTION_ID) == YES

    def unanswered(self) -> list[Question]:
        return [q for q in CT_QUESTIONS if not self.answers.get(q.id)]

    @property
    def is_complete(self) -> bool:
        return not self.unanswered()
