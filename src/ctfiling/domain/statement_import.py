"""Bank statement CSV import."""

import csv
from decimal import Decimal
from pathlib import Path
from typing import NamedTuple, Optional

from ctfiling.domain.entities import UNCATEGORIZED, ZERO, BankStatementSummary, Transaction
from ctfiling.domain.errors import ValidationError
from ctfiling.utils.amount_parser import parse_amount
from ctfiling.utils.date_parser import parse_date

REQUIRED_COLUMNS = ("date", "description")
AMOUNT_COLUMNS = ("debit", "credit")


class StatementImport(NamedTuple):
    file_name: str
    transactions: list[Transaction]
    summary: Optional[BankStatementSummary]
    errors: list[str]


def _optional_amount(value: Optional[str]) -> Optional[Decimal]:
    if value is None or not value.strip():
        return None
    return parse_amount(value)


def infer_summary(transactions: list[Transaction]) -> Optional[BankStatementSummary]:
    """Infer a statement's opening and closing balance from its running balance.

    The opening balance is the first row's balance with that row's movement
    undone; the closing balance is the last row's balance. Returns None when
    the first or last row carries no balance.
    """
    if not transactions:
        return None
    first, last = transactions[0], transactions[-1]
    if first.balance is None or last.balance is None:
        return None
    opening = first.balance + first.debit - first.credit
    return BankStatementSummary(opening_balance=opening, closing_balance=last.balance)


def read_statement_csv(
    csv_file_path: str,
    opening_balance: Optional[Decimal] = None,
    closing_balance: Optional[Decimal] = None,
) -> StatementImport:
    """Read bank statement rows from a CSV file.

    Expected columns (case-insensitive): Date, Description, Debit, Credit and
    optionally Balance, Category, Currency. Rows that cannot be parsed are
    reported in ``errors`` and skipped.

    Args:
        csv_file_path: Path to CSV file
        opening_balance: Reported opening balance; inferred when omitted
        closing_balance: Reported closing balance; inferred when omitted

    Returns:
        StatementImport with the parsed transactions and statement summary

    Raises:
        ValidationError: If required columns are missing
        FileNotFoundError: If the CSV file doesn't exist
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    transactions: list[Transaction] = []
    errors: list[str] = []

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        sample = f.read(1024)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
        except csv.Error:
            delimiter = ","

        reader = csv.DictReader(f, delimiter=delimiter)
        if reader.fieldnames is None:
            raise ValidationError("CSV file has no columns")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = [col for col in REQUIRED_COLUMNS if col not in columns]
        if not any(col in columns for col in AMOUNT_COLUMNS):
            missing.append("debit/credit")
        if missing:
            raise ValidationError(f"CSV file missing required columns: {', '.join(missing)}")

        def value(row: dict, column: str) -> Optional[str]:
            source = columns.get(column)
            if source is None:
                return None
            raw = row.get(source)
            return raw.strip() if raw else None

        for row_num, row in enumerate(reader, start=2):  # header is row 1
            date_str = value(row, "date")
            if not date_str:
                errors.append(f"Row {row_num}: Missing date")
                continue
            try:
                txn_date = parse_date(date_str)
                debit = _optional_amount(value(row, "debit")) or ZERO
                credit = _optional_amount(value(row, "credit")) or ZERO
                balance = _optional_amount(value(row, "balance"))
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")
                continue

            transactions.append(
                Transaction(
                    date=txn_date,
                    description=value(row, "description") or "",
                    debit=abs(debit),
                    credit=abs(credit),
                    balance=balance,
                    category=value(row, "category") or UNCATEGORIZED,
                    source_file=csv_path.name,
                    currency=value(row, "currency"),
                )
            )

    summary = infer_summary(transactions)
    if opening_balance is not None or closing_balance is not None:
        summary = BankStatementSummary(
            opening_balance=opening_balance if opening_balance is not None
            else (summary.opening_balance if summary else ZERO),
            closing_balance=closing_balance if closing_balance is not None
            else (summary.closing_balance if summary else ZERO),
        )

    return StatementImport(
        file_name=csv_path.name,
        transactions=transactions,
        summary=summary,
        errors=errors,
    )
