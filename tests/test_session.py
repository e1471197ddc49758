"""Tests for the filing session aggregate."""

from decimal import Decimal

import pytest

from ctfiling.domain.entities import BreakdownEntry, UNCATEGORIZED
from ctfiling.domain.errors import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from ctfiling.domain.session import FilingSession
from ctfiling.domain.workflow import WorkflowStage
from ctfiling.integrations.base import DocumentExtractor, TransactionCategorizer

RENT = "Expenses | OtherExpense | Rent Expense"


class FailingCategorizer(TransactionCategorizer):
    def categorize(self, transactions):
        raise ExternalServiceError("Categorization failed: service unavailable")


class FailingExtractor(DocumentExtractor):
    def extract(self, documents):
        raise ExternalServiceError("Document extraction failed: timeout")


class StubExtractor(DocumentExtractor):
    def __init__(self, responses):
        self.responses = responses

    def extract(self, documents):
        merged = {}
        for document in documents:
            merged.update(self.responses[document])
        return merged


def test_name_required():
    with pytest.raises(ValidationError):
        FilingSession(name="  ")


def test_import_statement_stamps_source_file(sample_session, sample_transactions):
    added = sample_session.import_statement("feb.csv", sample_transactions[:2])

    assert added == 2
    assert len(sample_session.ledger) == 6
    assert sample_session.ledger.source_files() == ["jan.csv", "feb.csv"]
    assert "feb.csv" not in sample_session.bank_summaries


def test_categorize_single_and_bulk(sample_session):
    assert sample_session.categorize([3], "rent expense") == 1
    assert sample_session.ledger[3].category == RENT

    assert sample_session.categorize([0, 1], RENT) == 2
    assert sample_session.ledger[1].category == RENT


def test_categorize_rejects_unknown_category(sample_session):
    with pytest.raises(ValidationError, match="not found in the chart"):
        sample_session.categorize([0], "Nonexistent Category XYZ")


def test_categorize_out_of_range(sample_session):
    with pytest.raises(NotFoundError):
        sample_session.categorize([10], RENT)


def test_custom_category(sample_session):
    path = sample_session.add_custom_category("Expenses", "Pantry Supplies")

    assert path == "Expenses | Pantry Supplies"
    sample_session.categorize([3], path)
    assert sample_session.ledger[3].category == path

    with pytest.raises(ConflictError):
        sample_session.add_custom_category("Expenses", "Pantry Supplies")
    with pytest.raises(ValidationError):
        sample_session.add_custom_category("Overheads", "Pantry")


def test_find_and_replace_and_delete(sample_session):
    assert sample_session.find_and_replace("office rent", RENT) == 1
    assert sample_session.ledger.uncategorized_count() == 0

    removed = sample_session.delete_transaction(0)
    assert removed.description == "POS ENOC FUEL STATION"
    assert len(sample_session.ledger) == 3


def test_ledger_edits_only_during_review(sample_session):
    sample_session.stage = WorkflowStage.SUMMARIZE

    with pytest.raises(WorkflowError, match="Review Categories"):
        sample_session.categorize([0], RENT)
    with pytest.raises(WorkflowError):
        sample_session.delete_transaction(0)


def test_failed_categorizer_leaves_ledger_unchanged(sample_session):
    before = sample_session.ledger.transactions
    log_size = len(sample_session.mutation_log)

    with pytest.raises(ExternalServiceError):
        sample_session.auto_categorize(FailingCategorizer())

    assert sample_session.ledger.transactions == before
    assert len(sample_session.mutation_log) == log_size


def test_reconciliation_and_balance_check(sample_session):
    results = sample_session.reconciliation()

    assert len(results) == 1
    assert results[0].calculated_closing == Decimal("11750")
    assert results[0].is_valid
    assert sample_session.balance_check().is_valid
    assert sample_session.balance_check("jan.csv").is_valid


def test_extract_vat_documents(sample_session):
    sample_session.stage = WorkflowStage.VAT_DOCS
    extractor = StubExtractor(
        {
            "docs/q1.pdf": {"salesTotal": "1000", "expensesTotal": "400", "share_capital": "10000"},
            "docs/q2.pdf": {"sales_total": 500, "expenses_total": 100},
        }
    )

    results = sample_session.extract_vat_documents(extractor, ["docs/q1.pdf", "docs/q2.pdf"])

    assert [r.file_name for r in results] == ["q1.pdf", "q2.pdf"]
    assert sample_session.additional_details == {"share_capital": "10000"}
    assert sample_session.apply_extracted_share_capital()


def test_failed_vat_extraction_keeps_previous_results(sample_session):
    sample_session.stage = WorkflowStage.VAT_DOCS
    sample_session.extract_vat_documents(StubExtractor({"a.pdf": {"salesTotal": 1}}), ["a.pdf"])

    with pytest.raises(ExternalServiceError):
        sample_session.extract_vat_documents(FailingExtractor(), ["b.pdf"])

    assert [r.file_name for r in sample_session.vat_results] == ["a.pdf"]


def test_opening_balance_edits(sample_session):
    with pytest.raises(WorkflowError):
        sample_session.set_opening_balance("Cash on Hand", "debit", "5")

    sample_session.stage = WorkflowStage.OPENING_BALANCES
    sample_session.set_opening_balance("Cash on Hand", "debit", "5")
    sample_session.add_opening_account("Assets", "Petty Cash")

    with pytest.raises(ConflictError):
        sample_session.add_opening_account("Assets", "petty cash")

    applied = sample_session.extract_opening_balances(
        StubExtractor({"tb.json": {"accounts_payable": "250"}}), ["tb.json"]
    )
    assert applied == 1
    assert [e.account for e in sample_session.opening_balances.entries()] == [
        "Cash on Hand",
        "Accounts Payable",
    ]


def test_trial_balance_edits_need_adjust_stage(sample_session):
    with pytest.raises(WorkflowError):
        sample_session.set_trial_balance_cell("Bank Accounts", "debit", "1")

    sample_session.stage = WorkflowStage.ADJUST_TRIAL_BALANCE
    with pytest.raises(WorkflowError, match="not been built"):
        sample_session.set_trial_balance_cell("Bank Accounts", "debit", "1")


def test_trial_balance_edits(sample_session):
    sample_session.share_capital = Decimal("10000")
    sample_session.build_trial_balance()
    sample_session.stage = WorkflowStage.ADJUST_TRIAL_BALANCE

    assert sample_session.trial_balance.is_balanced
    assert sample_session.trial_balance.get(UNCATEGORIZED).debit == Decimal("3000")

    sample_session.save_working_note(
        "Fuel Expenses",
        [BreakdownEntry("ENOC", debit=Decimal("150")), BreakdownEntry("ADNOC", debit=Decimal("50"))],
    )
    assert sample_session.trial_balance.get("Fuel Expenses").debit == Decimal("200")
    assert sample_session.add_trial_balance_account("Deposits")
    assert not sample_session.add_trial_balance_account("deposits")
    sample_session.set_trial_balance_cell("Deposits", "debit", "0")
    assert sample_session.trial_balance.is_balanced


def _adjustable(session):
    session.share_capital = Decimal("10000")
    session.build_trial_balance()
    session.stage = WorkflowStage.ADJUST_TRIAL_BALANCE
    return session.trial_balance


def test_working_note_locks_account_cells(sample_session):
    trial_balance = _adjustable(sample_session)
    sample_session.save_working_note(
        "Accrued Expenses", [BreakdownEntry("Audit fee", credit=Decimal("5000"))]
    )
    log_size = len(sample_session.mutation_log)

    with pytest.raises(ConflictError, match="working note"):
        sample_session.set_trial_balance_cell("accrued expenses", "credit", "1")

    assert trial_balance.get("Accrued Expenses").credit == Decimal("5000")
    assert trial_balance.breakdown("Accrued Expenses") == [
        BreakdownEntry("Audit fee", credit=Decimal("5000"))
    ]
    assert len(sample_session.mutation_log) == log_size

    sample_session.save_working_note("Accrued Expenses", [])
    entry = sample_session.set_trial_balance_cell("Accrued Expenses", "credit", "1")
    assert entry.credit == Decimal("1")


def test_working_note_on_totals_rejected(sample_session):
    trial_balance = _adjustable(sample_session)
    before = trial_balance.entries()

    with pytest.raises(ValidationError, match="Totals"):
        sample_session.save_working_note("Totals", [BreakdownEntry("x", debit=Decimal("5"))])

    assert trial_balance.entries() == before


@pytest.mark.parametrize(
    "stage",
    [WorkflowStage.PROFIT_LOSS, WorkflowStage.QUESTIONNAIRE, WorkflowStage.FINAL_REPORT],
)
def test_trial_balance_locked_after_adjust_stage(sample_session, stage):
    trial_balance = _adjustable(sample_session)
    assert trial_balance.is_balanced
    sample_session.stage = stage

    with pytest.raises(WorkflowError, match="Adjust Trial Balance"):
        sample_session.set_trial_balance_cell("Bank Accounts", "debit", "999")
    with pytest.raises(WorkflowError):
        sample_session.save_working_note("Fuel Expenses", [BreakdownEntry("ENOC", debit=Decimal("1"))])
    with pytest.raises(WorkflowError):
        sample_session.add_trial_balance_account("Deposits")

    assert trial_balance.is_balanced


def test_questionnaire_needs_questionnaire_stage(sample_session):
    with pytest.raises(WorkflowError):
        sample_session.answer_question(1, "No")
    with pytest.raises(WorkflowError):
        sample_session.set_revenue(current="100")


def test_figures_need_trial_balance(sample_session):
    with pytest.raises(WorkflowError):
        sample_session.figures()


def test_mutation_log_records_changes(sample_session):
    sample_session.categorize([3], RENT)

    last = sample_session.mutation_log[-1]
    assert last.stage == WorkflowStage.REVIEW
    assert last.action == "categorize"
    assert last.detail == f"1 rows -> {RENT}"
    assert sample_session.mutation_log[0].action == "import_statement"
