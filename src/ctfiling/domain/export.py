"""Flat row lists of a filing session, one list per spreadsheet sheet."""

from typing import Any, TYPE_CHECKING

from ctfiling.domain.category import child_category
from ctfiling.domain.derivation import as_rows
from ctfiling.domain.questionnaire import CT_QUESTIONS
from ctfiling.domain.vat import vat_totals
from ctfiling.utils.date_parser import format_date

if TYPE_CHECKING:
    from ctfiling.domain.session import FilingSession

Rows = list[dict[str, Any]]


def transaction_rows(session: "FilingSession") -> Rows:
    return [
        {
            "Date": format_date(txn.date),
            "Description": txn.description,
            "Debit": txn.debit or None,
            "Credit": txn.credit or None,
            "Balance": txn.balance,
            "Category": child_category(txn.category),
            "Source File": txn.source_file or "",
        }
        for txn in session.ledger
    ]


def summary_rows(session: "FilingSession") -> Rows:
    return [
        {"Category": item.category, "Debit": item.debit, "Credit": item.credit}
        for item in session.category_summary()
    ]


def reconciliation_rows(session: "FilingSession") -> Rows:
    return [
        {
            "File Name": result.file_name,
            "Opening Balance": result.opening_balance,
            "Total Debit": result.total_debit,
            "Total Credit": result.total_credit,
            "Calculated Closing": result.calculated_closing,
            "Reported Closing": result.closing_balance,
            "Difference": result.diff,
            "Status": "Balanced" if result.is_valid else "Mismatch",
        }
        for result in session.reconciliation()
    ]


def vat_rows(session: "FilingSession") -> Rows:
    if not session.vat_results:
        return []
    rows = [
        {
            "File Name": result.file_name,
            "VAT Period From": result.period_from or "N/A",
            "VAT Period To": result.period_to or "N/A",
            "Sales Total (Field 8)": result.sales_total,
            "Expenses Total (Field 11)": result.expenses_total,
        }
        for result in session.vat_results
    ]
    sales, expenses = vat_totals(session.vat_results)
    rows.append(
        {
            "File Name": "Total",
            "VAT Period From": "",
            "VAT Period To": "",
            "Sales Total (Field 8)": sales,
            "Expenses Total (Field 11)": expenses,
        }
    )
    return rows


def opening_balance_rows(session: "FilingSession") -> Rows:
    return [
        {
            "Category": section.category,
            "Sub Category": account.sub_category or "",
            "Account": account.name,
            "Debit": account.debit,
            "Credit": account.credit,
        }
        for section in session.opening_balances.categories
        for account in section.accounts
        if account.debit or account.credit
    ]


def trial_balance_rows(session: "FilingSession") -> Rows:
    trial_balance = session.trial_balance
    if trial_balance is None:
        return []
    rows = []
    for entry in trial_balance.entries():
        notes = trial_balance.breakdown(entry.account)
        rows.append(
            {
                "Account": entry.account,
                "Debit": entry.debit,
                "Credit": entry.credit,
                "Working Notes": "; ".join(
                    f"{note.description}: {note.debit - note.credit}" for note in notes
                ),
            }
        )
    return rows


def figure_rows(session: "FilingSession") -> Rows:
    if session.trial_balance is None:
        return []
    return [
        {"Section": section, "Item": label, "Amount": amount}
        for section, label, amount in as_rows(session.figures())
    ]


def questionnaire_rows(session: "FilingSession") -> Rows:
    answers = session.questionnaire.answers
    return [
        {"No.": question.id, "Question": question.text, "Answer": answers.get(question.id) or "-"}
        for question in CT_QUESTIONS
    ]


SHEETS = (
    ("transactions", transaction_rows),
    ("summary", summary_rows),
    ("reconciliation", reconciliation_rows),
    ("vat_summary", vat_rows),
    ("opening_balances", opening_balance_rows),
    ("trial_balance", trial_balance_rows),
    ("tax_return", figure_rows),
    ("questionnaire", questionnaire_rows),
)


def export_session(session: "FilingSession") -> dict[str, Rows]:
    """Collect every non-empty sheet of a session, in workflow order."""
    sheets = {}
    for name, build in SHEETS:
        rows = build(session)
        if rows:
            sheets[name] = rows
    return sheets
