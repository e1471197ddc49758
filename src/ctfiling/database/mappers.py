"""Mapper functions to convert between the filing session and its stored row.

The ORM row keeps the searchable columns (name, company, stage) next to a
JSON ``state`` document holding the rest of the aggregate. Money is stored
as decimal strings and dates as ISO strings so nothing loses precision.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ctfiling.database.models import FilingSessionRecord
from ctfiling.domain import entities as domain
from ctfiling.domain.opening_balance import OpeningBalanceSet
from ctfiling.domain.questionnaire import Questionnaire
from ctfiling.domain.session import FilingSession
from ctfiling.domain.transaction import TransactionLedger
from ctfiling.domain.trial_balance import TrialBalance
from ctfiling.domain.workflow import WorkflowStage


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _decimal(value: Optional[str]) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def _transaction_to_dict(txn: domain.Transaction) -> dict[str, Any]:
    return {
        "date": txn.date.isoformat() if txn.date else None,
        "description": txn.description,
        "debit": _money(txn.debit),
        "credit": _money(txn.credit),
        "balance": _money(txn.balance),
        "category": txn.category,
        "source_file": txn.source_file,
        "confidence": txn.confidence,
        "currency": txn.currency,
    }


def _transaction_from_dict(data: dict[str, Any]) -> domain.Transaction:
    return domain.Transaction(
        date=date.fromisoformat(data["date"]) if data.get("date") else None,
        description=data.get("description", ""),
        debit=Decimal(data.get("debit") or "0"),
        credit=Decimal(data.get("credit") or "0"),
        balance=_decimal(data.get("balance")),
        category=data.get("category") or domain.UNCATEGORIZED,
        source_file=data.get("source_file"),
        confidence=data.get("confidence"),
        currency=data.get("currency"),
    )


def _entry_to_dict(entry) -> dict[str, Any]:
    return {"debit": str(entry.debit), "credit": str(entry.credit)}


def session_to_state(session: FilingSession) -> dict[str, Any]:
    """Serialize the parts of a session not kept in their own columns."""
    trial_balance = session.trial_balance
    return {
        "share_capital": _money(session.share_capital),
        "transactions": [_transaction_to_dict(t) for t in session.ledger],
        "selection": sorted(session.ledger.selection),
        "bank_summaries": {
            name: {
                "opening_balance": str(s.opening_balance),
                "closing_balance": str(s.closing_balance),
            }
            for name, s in session.bank_summaries.items()
        },
        "opening_balances": [
            {
                "category": section.category,
                "accounts": [
                    {
                        "name": acc.name,
                        "debit": str(acc.debit),
                        "credit": str(acc.credit),
                        "sub_category": acc.sub_category,
                        "is_new": acc.is_new,
                    }
                    for acc in section.accounts
                ],
            }
            for section in session.opening_balances.categories
        ],
        "vat_results": [
            {
                "file_name": r.file_name,
                "sales_total": str(r.sales_total),
                "expenses_total": str(r.expenses_total),
                "period_from": r.period_from,
                "period_to": r.period_to,
            }
            for r in session.vat_results
        ],
        "additional_details": session.additional_details,
        "vat_answers": list(session.vat_answers),
        "vat_route": session.vat_route,
        "trial_balance": None if trial_balance is None else {
            "entries": [
                {"account": e.account, **_entry_to_dict(e)} for e in trial_balance.rows
            ],
            "breakdowns": {
                account: [{"description": b.description, **_entry_to_dict(b)} for b in items]
                for account, items in trial_balance.breakdowns.items()
            },
        },
        "questionnaire": {
            "answers": {str(k): v for k, v in session.questionnaire.answers.items()},
            "current_revenue": _money(session.questionnaire.current_revenue),
            "previous_revenue": _money(session.questionnaire.previous_revenue),
        },
        "custom_categories": list(session.custom_categories),
        "mutation_log": [
            {"stage": m.stage, "action": m.action, "detail": m.detail}
            for m in session.mutation_log
        ],
    }


def session_to_domain(record: FilingSessionRecord) -> FilingSession:
    """Convert a stored row back into a FilingSession."""
    state = record.state or {}

    transactions = [_transaction_from_dict(t) for t in state.get("transactions", [])]
    ledger = TransactionLedger(transactions, selection=state.get("selection", []))

    opening_balances = None
    if state.get("opening_balances"):
        opening_balances = OpeningBalanceSet(
            domain.OpeningBalanceCategory(
                category=section["category"],
                accounts=[
                    domain.OpeningBalanceAccount(
                        name=acc["name"],
                        debit=Decimal(acc["debit"]),
                        credit=Decimal(acc["credit"]),
                        sub_category=acc.get("sub_category"),
                        is_new=acc.get("is_new", False),
                    )
                    for acc in section["accounts"]
                ],
            )
            for section in state["opening_balances"]
        )

    trial_balance = None
    tb_state = state.get("trial_balance")
    if tb_state is not None:
        trial_balance = TrialBalance(
            [
                domain.TrialBalanceEntry(
                    account=e["account"], debit=Decimal(e["debit"]), credit=Decimal(e["credit"])
                )
                for e in tb_state.get("entries", [])
            ],
            breakdowns={
                account: [
                    domain.BreakdownEntry(
                        description=b["description"],
                        debit=Decimal(b["debit"]),
                        credit=Decimal(b["credit"]),
                    )
                    for b in items
                ]
                for account, items in tb_state.get("breakdowns", {}).items()
            },
        )

    q_state = state.get("questionnaire", {})
    questionnaire = Questionnaire(
        answers={int(k): v for k, v in q_state.get("answers", {}).items()},
        current_revenue=_decimal(q_state.get("current_revenue")),
        previous_revenue=_decimal(q_state.get("previous_revenue")),
    )

    return FilingSession(
        id=record.id,
        name=record.name,
        company_name=record.company_name,
        share_capital=_decimal(state.get("share_capital")),
        stage=WorkflowStage(record.stage),
        ledger=ledger,
        bank_summaries={
            name: domain.BankStatementSummary(
                opening_balance=Decimal(s["opening_balance"]),
                closing_balance=Decimal(s["closing_balance"]),
            )
            for name, s in state.get("bank_summaries", {}).items()
        },
        opening_balances=opening_balances,
        vat_results=[
            domain.VatFileResult(
                file_name=r["file_name"],
                sales_total=Decimal(r["sales_total"]),
                expenses_total=Decimal(r["expenses_total"]),
                period_from=r.get("period_from"),
                period_to=r.get("period_to"),
            )
            for r in state.get("vat_results", [])
        ],
        additional_details=state.get("additional_details", {}),
        vat_answers=state.get("vat_answers", []),
        vat_route=state.get("vat_route"),
        trial_balance=trial_balance,
        questionnaire=questionnaire,
        custom_categories=state.get("custom_categories", []),
        mutation_log=[
            domain.MutationRecord(stage=m["stage"], action=m["action"], detail=m.get("detail", ""))
            for m in state.get("mutation_log", [])
        ],
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
