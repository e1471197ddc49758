"""Filing session aggregate.

A FilingSession owns every piece of state of one corporate tax filing: the
transaction ledger, statement balances, opening balances, VAT results, the
trial balance, questionnaire answers and the workflow stage. Every change
goes through a method here and is appended to the mutation log.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

import structlog

from ctfiling.domain.category import custom_category_path
from ctfiling.domain.chart_of_accounts import CHART_OF_ACCOUNTS
from ctfiling.domain.derivation import derive
from ctfiling.domain.entities import (
    ZERO,
    AccountKey,
    BankStatementSummary,
    BreakdownEntry,
    CategorySummary,
    FtaFormValues,
    MutationRecord,
    OpeningBalanceAccount,
    ReconciliationResult,
    Transaction,
    TrialBalanceEntry,
    VatFileResult,
)
from ctfiling.domain.errors import (
    ConflictError,
    ValidationError,
    WorkflowError,
    category_not_in_chart,
    duplicate_custom_category,
    stage_not_reached,
    stage_required,
    totals_not_editable,
    trial_balance_not_built,
    working_note_locked,
)
from ctfiling.domain.opening_balance import OpeningBalanceSet
from ctfiling.domain.questionnaire import Questionnaire
from ctfiling.domain.reconciliation import (
    reconcile_statements,
    total_closing_balance,
    validate_balance,
)
from ctfiling.domain.transaction import TransactionLedger
from ctfiling.domain.trial_balance import TrialBalance
from ctfiling.domain.vat import VAT_FLOW_QUESTIONS, vat_result_from_extraction
from ctfiling.domain.workflow import WorkflowStage

logger = structlog.get_logger(__name__)

# Extraction keys describing a VAT return rather than the company
VAT_RESULT_KEYS = frozenset(
    {
        "salesTotal",
        "salesField8",
        "sales_total",
        "expensesTotal",
        "expensesField11",
        "expenses_total",
        "periodFrom",
        "period_from",
        "periodTo",
        "period_to",
    }
)


class FilingSession:
    """State of one corporate tax filing."""

    def __init__(
        self,
        name: str,
        company_name: Optional[str] = None,
        share_capital: Optional[Decimal] = None,
        id: Optional[int] = None,
        stage: WorkflowStage = WorkflowStage.REVIEW,
        ledger: Optional[TransactionLedger] = None,
        bank_summaries: Optional[Mapping[str, BankStatementSummary]] = None,
        opening_balances: Optional[OpeningBalanceSet] = None,
        vat_results: Iterable[VatFileResult] = (),
        additional_details: Optional[Mapping[str, Any]] = None,
        vat_answers: Iterable[bool] = (),
        vat_route: Optional[bool] = None,
        trial_balance: Optional[TrialBalance] = None,
        questionnaire: Optional[Questionnaire] = None,
        custom_categories: Iterable[str] = (),
        mutation_log: Iterable[MutationRecord] = (),
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        if not name or not name.strip():
            raise ValidationError("Session name cannot be empty")
        self.id = id
        self.name = name.strip()
        self.company_name = company_name
        self.share_capital = share_capital
        self.stage = WorkflowStage(stage)
        self.ledger = ledger if ledger is not None else TransactionLedger()
        self.bank_summaries: dict[str, BankStatementSummary] = dict(bank_summaries or {})
        self.opening_balances = opening_balances if opening_balances is not None else OpeningBalanceSet()
        self.vat_results: list[VatFileResult] = list(vat_results)
        self.additional_details: dict[str, Any] = dict(additional_details or {})
        self.vat_answers: list[bool] = list(vat_answers)
        self.vat_route = vat_route
        self.trial_balance = trial_balance
        self.questionnaire = questionnaire if questionnaire is not None else Questionnaire()
        self.custom_categories: list[str] = list(custom_categories)
        self.mutation_log: list[MutationRecord] = list(mutation_log)
        self.created_at = created_at
        self.updated_at = updated_at

    def record(self, action: str, detail: str = "") -> MutationRecord:
        """Append an entry to the mutation log."""
        entry = MutationRecord(stage=int(self.stage), action=action, detail=detail)
        self.mutation_log.append(entry)
        return entry

    def _require_stage(self, action: str, *stages: WorkflowStage) -> None:
        if self.stage not in stages:
            raise WorkflowError(stage_required(action, stages[0].label))

    def _require_trial_balance(self) -> TrialBalance:
        if self.trial_balance is None:
            raise WorkflowError(trial_balance_not_built())
        return self.trial_balance

    # Transactions

    def import_statement(
        self,
        file_name: str,
        transactions: Sequence[Transaction],
        summary: Optional[BankStatementSummary] = None,
    ) -> int:
        """Add a bank statement's transactions to the ledger.

        Args:
            file_name: Statement file name; stamped on every transaction
            transactions: Extracted rows with raw category strings
            summary: Reported opening/closing balance of the statement

        Returns:
            Number of transactions added

        Raises:
            WorkflowError: If the session is past the review stage
        """
        self._require_stage("import statements", WorkflowStage.REVIEW)
        rows = [
            txn if txn.source_file == file_name else replace(txn, source_file=file_name)
            for txn in transactions
        ]
        added = self.ledger.extend(rows)
        if summary is not None:
            self.bank_summaries[file_name] = summary
        self.record("import_statement", f"{file_name}: {added} rows")
        logger.info("statement_imported", file=file_name, rows=added)
        return added

    def categorize(self, indices: Iterable[int], path: str) -> int:
        """Set one category on the given ledger rows.

        Returns:
            Number of rows changed

        Raises:
            ValidationError: If the category is neither on the chart nor custom
            NotFoundError: If a single index is outside the ledger
        """
        self._require_stage("edit categories", WorkflowStage.REVIEW)
        stored = self._validate_category(path)
        indices = list(indices)
        if len(indices) == 1:
            self.ledger.set_category(indices[0], stored)
            changed = 1
        else:
            changed = self.ledger.bulk_apply(indices, stored)
        self.record("categorize", f"{changed} rows -> {stored}")
        return changed

    def find_and_replace(self, find_text: str, path: str) -> int:
        """Re-categorize rows whose description contains some text."""
        self._require_stage("edit categories", WorkflowStage.REVIEW)
        stored = self._validate_category(path)
        changed = self.ledger.find_and_replace(find_text, stored)
        self.record("find_and_replace", f"'{find_text}' -> {stored}: {changed} rows")
        return changed

    def delete_transaction(self, index: int) -> Transaction:
        """Delete one ledger row."""
        self._require_stage("delete transactions", WorkflowStage.REVIEW)
        removed = self.ledger.delete(index)
        self.record("delete_transaction", f"#{index} {removed.description}")
        return removed

    def auto_categorize(self, categorizer) -> int:
        """Run the categorization service over the whole ledger.

        The service is called before anything changes, so a failure
        (ExternalServiceError) leaves the ledger as it was.

        Returns:
            Number of rows still uncategorized
        """
        self._require_stage("categorize transactions", WorkflowStage.REVIEW)
        categorized = categorizer.categorize(self.ledger.transactions)
        remaining = self.ledger.apply_categorization(categorized)
        self.record("auto_categorize", f"{remaining} uncategorized")
        return remaining

    def add_custom_category(self, main: str, name: str) -> str:
        """Register a user-defined category under a main category.

        Returns:
            The new category path

        Raises:
            ValidationError: If the main category is unknown or the name is blank
            ConflictError: If the category already exists
        """
        if main not in CHART_OF_ACCOUNTS:
            raise ValidationError(
                f"Main category must be one of: {', '.join(CHART_OF_ACCOUNTS)}"
            )
        if not name or not name.strip():
            raise ValidationError("Category name cannot be empty")
        path = custom_category_path(main, name)
        if path in self.custom_categories or self.ledger.resolver.is_canonical(path):
            raise ConflictError(duplicate_custom_category(path))
        self.custom_categories.append(path)
        self.record("add_custom_category", path)
        return path

    def _validate_category(self, path: str) -> str:
        stored = self.ledger.resolver.validate_choice(path, self.custom_categories)
        if stored is None:
            raise ValidationError(category_not_in_chart(path))
        return stored

    def category_summary(self, source_file: Optional[str] = None) -> list[CategorySummary]:
        return self.ledger.summarize(source_file)

    def reconciliation(self) -> list[ReconciliationResult]:
        return reconcile_statements(self.ledger, self.bank_summaries)

    def balance_check(self, source_file: Optional[str] = None) -> ReconciliationResult:
        """Running balance check for one statement, or all statements combined."""
        if source_file is not None:
            summary = self.bank_summaries.get(source_file)
        elif self.bank_summaries:
            summaries = self.bank_summaries.values()
            summary = BankStatementSummary(
                opening_balance=sum((s.opening_balance for s in summaries), ZERO),
                closing_balance=sum((s.closing_balance for s in summaries), ZERO),
            )
        else:
            summary = None
        return validate_balance(self.ledger, summary, source_file)

    # VAT documents

    @property
    def pending_vat_question(self) -> Optional[str]:
        """The VAT availability question awaiting an answer, if any."""
        if self.vat_route is not None or len(self.vat_answers) >= len(VAT_FLOW_QUESTIONS):
            return None
        return VAT_FLOW_QUESTIONS[len(self.vat_answers)]

    def reset_vat_route(self) -> None:
        self.vat_answers = []
        self.vat_route = None

    def extract_vat_documents(self, extractor, documents: Sequence[str]) -> list[VatFileResult]:
        """Extract per-file VAT totals, replacing earlier results.

        Extraction keys that do not describe the VAT return (such as a share
        capital figure) are kept as additional details.

        Raises:
            WorkflowError: If the session is not at the VAT documents stage
            ExternalServiceError: If extraction fails; nothing is changed
        """
        self._require_stage("extract VAT documents", WorkflowStage.VAT_DOCS)
        results = []
        details: dict[str, Any] = {}
        for document in documents:
            data = extractor.extract([document])
            results.append(vat_result_from_extraction(Path(document).name, data))
            details.update({k: v for k, v in data.items() if k not in VAT_RESULT_KEYS})

        self.vat_results = results
        self.additional_details.update(details)
        self.record("extract_vat_documents", f"{len(results)} files")
        return results

    def apply_extracted_share_capital(self) -> bool:
        """Carry a share capital figure found in VAT documents into opening balances."""
        applied = self.opening_balances.apply_share_capital(self.additional_details)
        if applied:
            self.record("apply_share_capital", "from additional documents")
        return applied

    # Opening balances

    def set_opening_balance(self, account: str, field: str, value: Any) -> OpeningBalanceAccount:
        self._require_stage("edit opening balances", WorkflowStage.OPENING_BALANCES)
        updated = self.opening_balances.set_value(account, field, value)
        self.record("set_opening_balance", f"{updated.name}.{field} = {getattr(updated, field)}")
        return updated

    def add_opening_account(self, category: str, name: str) -> OpeningBalanceAccount:
        """Add an opening balance account.

        Raises:
            ConflictError: If the section already has an account with this name
        """
        self._require_stage("edit opening balances", WorkflowStage.OPENING_BALANCES)
        account = self.opening_balances.add_account(category, name)
        if account is None:
            raise ConflictError(f"Account '{name.strip()}' already exists in {category}")
        self.record("add_opening_account", f"{category}: {account.name}")
        return account

    def extract_opening_balances(self, extractor, documents: Sequence[str]) -> int:
        """Merge opening balances extracted from prior-period documents.

        Returns:
            Number of extracted values applied
        """
        self._require_stage("extract opening balances", WorkflowStage.OPENING_BALANCES)
        details = extractor.extract(list(documents))
        applied = self.opening_balances.merge_extracted(details)
        self.record("extract_opening_balances", f"{applied} values applied")
        return applied

    # Trial balance

    def build_trial_balance(self) -> TrialBalance:
        """Aggregate the trial balance from opening balances, movements and bank closing."""
        closing = total_closing_balance(self.reconciliation())
        self.trial_balance = TrialBalance.build(
            self.opening_balances.entries(),
            self.ledger.summarize(),
            closing,
            share_capital=self.share_capital,
        )
        self.record("build_trial_balance", f"{len(self.trial_balance)} accounts")
        return self.trial_balance

    def _require_adjustable(self, action: str) -> TrialBalance:
        self._require_stage(action, WorkflowStage.ADJUST_TRIAL_BALANCE)
        return self._require_trial_balance()

    def set_trial_balance_cell(self, account: str, field: str, value: Any) -> TrialBalanceEntry:
        """Edit one trial balance cell.

        Raises:
            WorkflowError: If the session is not at the adjust stage
            ConflictError: If the account's figures come from a working note
        """
        trial_balance = self._require_adjustable("edit the trial balance")
        if trial_balance.has_breakdown(account):
            raise ConflictError(working_note_locked(account))
        entry = trial_balance.set_cell(account, field, value)
        self.record("set_trial_balance_cell", f"{entry.account}.{field} = {getattr(entry, field)}")
        return entry

    def save_working_note(self, account: str, entries: Iterable[BreakdownEntry]) -> list[BreakdownEntry]:
        trial_balance = self._require_adjustable("save working notes")
        if AccountKey.of(account).is_totals:
            raise ValidationError(totals_not_editable())
        kept = trial_balance.save_breakdown(account, entries)
        self.record("save_working_note", f"{account}: {len(kept)} lines")
        return kept

    def add_trial_balance_account(self, name: str) -> bool:
        trial_balance = self._require_adjustable("add trial balance accounts")
        added = trial_balance.add_account(name)
        if added:
            self.record("add_trial_balance_account", name.strip())
        return added

    # Questionnaire and figures

    def answer_question(self, question_id: int, value: str) -> str:
        if self.stage < WorkflowStage.QUESTIONNAIRE:
            raise WorkflowError(
                stage_not_reached("answer the questionnaire", WorkflowStage.QUESTIONNAIRE.label)
            )
        stored = self.questionnaire.answer(question_id, value)
        self.record("answer_question", f"Q{question_id} = {stored}")
        return stored

    def set_revenue(self, current: Any = None, previous: Any = None) -> None:
        if self.stage < WorkflowStage.QUESTIONNAIRE:
            raise WorkflowError(
                stage_not_reached("enter revenue", WorkflowStage.QUESTIONNAIRE.label)
            )
        self.questionnaire.set_revenue(current, previous)
        self.record(
            "set_revenue",
            f"current={self.questionnaire.current_revenue} previous={self.questionnaire.previous_revenue}",
        )

    def prefill_questionnaire_revenue(self) -> None:
        if self.trial_balance is None:
            return
        revenue = derive(self.trial_balance).actual_operating_revenue
        if self.questionnaire.prefill_revenue(revenue):
            self.record("prefill_revenue", str(revenue))

    @property
    def relief_claimed(self) -> bool:
        return self.questionnaire.relief_claimed

    def figures(self) -> FtaFormValues:
        """Derived return figures, honoring the Small Business Relief election."""
        return derive(self._require_trial_balance(), self.relief_claimed)
