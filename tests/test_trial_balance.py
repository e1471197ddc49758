"""Tests for trial balance aggregation and adjustment."""

from decimal import Decimal

import pytest

from ctfiling.domain.entities import (
    BreakdownEntry,
    CategorySummary,
    TrialBalanceEntry,
)
from ctfiling.domain.errors import ValidationError
from ctfiling.domain.trial_balance import TrialBalance

SHARE_CAPITAL = "Share Capital / Owner’s Equity"


def _assert_totals(trial_balance):
    entries = trial_balance.entries()
    totals = entries[-1]
    assert totals.account == "Totals"
    assert totals.debit == sum((e.debit for e in entries[:-1]), Decimal("0"))
    assert totals.credit == sum((e.credit for e in entries[:-1]), Decimal("0"))


def test_build_from_sample_session_inputs(sample_ledger):
    trial_balance = TrialBalance.build(
        opening_entries=[],
        category_summary=sample_ledger.summarize(),
        bank_closing_balance=Decimal("11750"),
        share_capital=Decimal("10000"),
    )

    assert trial_balance.get("Bank Accounts").debit == Decimal("11750")
    assert trial_balance.get(SHARE_CAPITAL).credit == Decimal("10000")
    assert trial_balance.get("Sales Revenue").credit == Decimal("5000")
    assert trial_balance.get("UNCATEGORIZED").debit == Decimal("3000")
    assert trial_balance.is_balanced
    _assert_totals(trial_balance)


def test_build_nets_each_account_to_one_side():
    trial_balance = TrialBalance.build(
        opening_entries=[
            TrialBalanceEntry("Accounts Receivable", debit=Decimal("1000")),
            TrialBalanceEntry("Vehicles", debit=Decimal("0"), credit=Decimal("0")),
        ],
        category_summary=[
            CategorySummary("accounts  receivable", debit=Decimal("0"), credit=Decimal("1500")),
            CategorySummary("Fuel Expenses", debit=Decimal("300"), credit=Decimal("100")),
        ],
        bank_closing_balance=Decimal("0"),
    )

    receivable = trial_balance.get("Accounts Receivable")
    assert receivable.account == "Accounts Receivable"
    assert (receivable.debit, receivable.credit) == (Decimal("0"), Decimal("500"))
    fuel = trial_balance.get("fuel expenses")
    assert (fuel.debit, fuel.credit) == (Decimal("200"), Decimal("0"))
    assert "Vehicles" not in trial_balance
    for entry in trial_balance.rows:
        assert entry.debit == 0 or entry.credit == 0


def test_build_bank_row_comes_from_closing_balance():
    trial_balance = TrialBalance.build(
        opening_entries=[TrialBalanceEntry("Bank Accounts", debit=Decimal("999"))],
        category_summary=[CategorySummary("Bank Accounts", debit=Decimal("1"), credit=Decimal("0"))],
        bank_closing_balance=Decimal("-250"),
    )

    bank = trial_balance.get("Bank Accounts")
    assert (bank.debit, bank.credit) == (Decimal("0"), Decimal("250"))


def test_totals_row_is_derived(balanced_trial_balance):
    _assert_totals(balanced_trial_balance)
    assert balanced_trial_balance.totals.debit == Decimal("550000")
    assert balanced_trial_balance.is_balanced


def test_constructor_drops_stored_totals():
    trial_balance = TrialBalance(
        [
            TrialBalanceEntry("Cash on Hand", debit=Decimal("10")),
            TrialBalanceEntry("Totals", debit=Decimal("999"), credit=Decimal("1")),
        ]
    )

    assert len(trial_balance) == 1
    assert trial_balance.totals.debit == Decimal("10")


def test_set_cell_updates_and_inserts(balanced_trial_balance):
    balanced_trial_balance.set_cell("Bank Charges", "debit", "60,000")
    balanced_trial_balance.set_cell("Vehicles", "debit", "5000")

    assert balanced_trial_balance.get("Bank Charges").debit == Decimal("60000")
    assert balanced_trial_balance.rows[-1].account == "Vehicles"
    assert balanced_trial_balance.difference == Decimal("15000")
    assert not balanced_trial_balance.is_balanced
    _assert_totals(balanced_trial_balance)


def test_set_cell_malformed_value_is_zero(balanced_trial_balance):
    entry = balanced_trial_balance.set_cell("Bank Charges", "debit", "n/a")
    assert entry.debit == Decimal("0")


def test_set_cell_on_totals_is_ignored(balanced_trial_balance):
    before = balanced_trial_balance.entries()

    balanced_trial_balance.set_cell("Totals", "debit", "1")

    assert balanced_trial_balance.entries() == before


def test_set_cell_rejects_unknown_field(balanced_trial_balance):
    with pytest.raises(ValidationError):
        balanced_trial_balance.set_cell("Bank Charges", "net", "1")


def test_breakdown_forces_account_to_sums(balanced_trial_balance):
    kept = balanced_trial_balance.save_breakdown(
        "Bank Charges",
        [
            BreakdownEntry("Transfer fees", debit=Decimal("30000")),
            BreakdownEntry("", debit=Decimal("0"), credit=Decimal("0")),
            BreakdownEntry("Card fees", debit=Decimal("25000"), credit=Decimal("5000")),
        ],
    )

    assert len(kept) == 2
    entry = balanced_trial_balance.get("Bank Charges")
    assert (entry.debit, entry.credit) == (Decimal("55000"), Decimal("5000"))
    assert balanced_trial_balance.has_breakdown("bank charges")
    assert list(balanced_trial_balance.breakdowns) == ["Bank Charges"]
    _assert_totals(balanced_trial_balance)


def test_empty_breakdown_removes_note(balanced_trial_balance):
    balanced_trial_balance.save_breakdown("Bank Charges", [BreakdownEntry("Fees", debit=Decimal("1"))])

    balanced_trial_balance.save_breakdown("Bank Charges", [])

    assert not balanced_trial_balance.has_breakdown("Bank Charges")
    assert balanced_trial_balance.breakdown("Bank Charges") == []
    assert balanced_trial_balance.get("Bank Charges").debit == Decimal("0")


def test_add_account(balanced_trial_balance):
    assert balanced_trial_balance.add_account("Deposits")
    assert not balanced_trial_balance.add_account("deposits")
    assert not balanced_trial_balance.add_account("Totals")
    assert not balanced_trial_balance.add_account("  ")

    assert balanced_trial_balance.entries()[-2].account == "Deposits"
    assert balanced_trial_balance.is_balanced


def test_breakdown_on_totals_is_ignored(balanced_trial_balance):
    before = balanced_trial_balance.entries()

    kept = balanced_trial_balance.save_breakdown("totals", [BreakdownEntry("x", debit=Decimal("5"))])

    assert kept == []
    assert balanced_trial_balance.entries() == before
    assert [e.account for e in balanced_trial_balance.entries()].count("Totals") == 1
    assert not balanced_trial_balance.has_breakdown("Totals")
    assert balanced_trial_balance.is_balanced


def test_totals_hold_across_interleaved_edits(balanced_trial_balance):
    tb = balanced_trial_balance

    def check():
        _assert_totals(tb)
        accounts = [e.account.casefold() for e in tb.entries()]
        assert len(accounts) == len(set(accounts))
        assert all(min(e.debit, e.credit) == 0 for e in tb.rows)

    steps = [
        lambda: tb.add_account("Deposits"),
        lambda: tb.set_cell("deposits", "debit", "2,500"),
        lambda: tb.save_breakdown("Accrued Expenses", [BreakdownEntry("Audit fee", credit=Decimal("2500"))]),
        lambda: tb.set_cell("Bank Charges", "debit", "45000"),
        lambda: tb.save_breakdown(
            "accrued expenses",
            [BreakdownEntry("Audit fee", credit=Decimal("4000")), BreakdownEntry("Utilities", credit=Decimal("3500"))],
        ),
        lambda: tb.add_account("Accrued Expenses"),
        lambda: tb.set_cell("Totals", "credit", "1"),
        lambda: tb.save_breakdown("Totals", [BreakdownEntry("x", debit=Decimal("5"))]),
        lambda: tb.save_breakdown("Accrued Expenses", []),
    ]
    for step in steps:
        step()
        check()

    assert [e.account for e in tb.entries()][-3:] == ["Deposits", "Accrued Expenses", "Totals"]
    assert tb.get("Accrued Expenses").credit == Decimal("0")
    assert tb.totals.debit == Decimal("547500")
    assert tb.totals.credit == Decimal("550000")
