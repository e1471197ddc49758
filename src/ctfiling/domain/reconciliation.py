"""Bank statement reconciliation checks.

A statement reconciles when its reported closing balance equals the
opening balance moved by the categorized transactions. Mismatches are
warnings; they never block the workflow.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

import structlog

from ctfiling.domain.entities import (
    ZERO,
    BankStatementSummary,
    ReconciliationResult,
    Transaction,
)

logger = structlog.get_logger(__name__)

FILE_TOLERANCE = Decimal("0.1")
BALANCE_TOLERANCE = Decimal("1.0")


def reconcile_statement(
    file_name: str,
    summary: Optional[BankStatementSummary],
    transactions: Iterable[Transaction],
    tolerance: Decimal = FILE_TOLERANCE,
) -> ReconciliationResult:
    """Reconcile one statement file.

    Args:
        file_name: Statement file name
        summary: Reported opening/closing balance, or None if unknown (zeros)
        transactions: The file's transactions
        tolerance: Largest difference still considered valid (exclusive)

    Returns:
        ReconciliationResult with calculated closing = opening - debits + credits
    """
    total_debit = ZERO
    total_credit = ZERO
    for txn in transactions:
        total_debit += txn.debit or ZERO
        total_credit += txn.credit or ZERO

    opening = summary.opening_balance if summary is not None else ZERO
    closing = summary.closing_balance if summary is not None else ZERO
    calculated = opening - total_debit + total_credit
    diff = abs(calculated - closing)
    result = ReconciliationResult(
        file_name=file_name,
        opening_balance=opening,
        total_debit=total_debit,
        total_credit=total_credit,
        calculated_closing=calculated,
        closing_balance=closing,
        is_valid=diff < tolerance,
        diff=diff,
    )
    if not result.is_valid:
        logger.warning("statement_not_reconciled", file=file_name, diff=str(diff))
    return result


def reconcile_statements(
    transactions: Iterable[Transaction],
    summaries: Mapping[str, BankStatementSummary],
) -> list[ReconciliationResult]:
    """Reconcile every statement file that has transactions.

    Files are reported in the order their first transaction appears.
    """
    by_file: dict[str, list[Transaction]] = {}
    for txn in transactions:
        if txn.source_file:
            by_file.setdefault(txn.source_file, []).append(txn)

    return [
        reconcile_statement(file_name, summaries.get(file_name), file_txns)
        for file_name, file_txns in by_file.items()
    ]


def validate_balance(
    transactions: Iterable[Transaction],
    summary: Optional[BankStatementSummary],
    source_file: Optional[str] = None,
) -> ReconciliationResult:
    """Check the running balance for one file, or for every file against one summary.

    Uses the looser tolerance of the review screen; with no summary or no
    matching transactions the check passes.
    """
    relevant = [
        txn for txn in transactions
        if source_file is None or txn.source_file == source_file
    ]
    name = source_file or "ALL"
    if summary is None or not relevant:
        return ReconciliationResult(
            file_name=name,
            opening_balance=ZERO,
            total_debit=ZERO,
            total_credit=ZERO,
            calculated_closing=ZERO,
            closing_balance=ZERO,
            is_valid=True,
            diff=ZERO,
        )
    return reconcile_statement(name, summary, relevant, tolerance=BALANCE_TOLERANCE)


def total_closing_balance(results: Iterable[ReconciliationResult]) -> Decimal:
    """Sum the reported closing balances of reconciled statements."""
    return sum((r.closing_balance for r in results), ZERO)
