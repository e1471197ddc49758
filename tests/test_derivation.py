"""Tests for the corporate tax return figures."""

from dataclasses import fields
from decimal import Decimal

from ctfiling.domain.derivation import (
    REPORT_LINES,
    apply_relief,
    as_rows,
    compute_corporate_tax,
    derive,
)
from ctfiling.domain.entities import FtaFormValues, TrialBalanceEntry


def test_compute_corporate_tax_threshold():
    assert compute_corporate_tax(Decimal("0")) == Decimal("0")
    assert compute_corporate_tax(Decimal("375000")) == Decimal("0")
    assert compute_corporate_tax(Decimal("475000")) == Decimal("9000")


def test_derive_balanced_trial_balance(balanced_trial_balance):
    values = derive(balanced_trial_balance)

    assert values.operating_revenue == Decimal("500000")
    assert values.deriving_revenue_expenses == Decimal("300000")
    assert values.gross_profit == Decimal("200000")
    assert values.salaries == Decimal("100000")
    assert values.other_expenses == Decimal("50000")
    assert values.non_op_expenses_excl == Decimal("150000")
    assert values.net_profit == Decimal("50000")
    assert values.total_comprehensive_income == Decimal("50000")
    assert values.total_current_assets == Decimal("100000")
    assert values.share_capital == Decimal("50000")
    assert values.total_equity_liabilities == Decimal("50000")
    assert values.taxable_income == Decimal("50000")
    assert values.corporate_tax_liability == Decimal("0")
    assert values.actual_operating_revenue == Decimal("500000")


def test_derive_tax_above_threshold():
    entries = [
        TrialBalanceEntry("Sales Revenue", credit=Decimal("600000")),
        TrialBalanceEntry("Direct Cost (COGS)", debit=Decimal("125000")),
    ]

    values = derive(entries)

    assert values.net_profit == Decimal("475000")
    assert values.corporate_tax_liability == Decimal("9000")


def test_derive_loss_has_zero_taxable_income():
    values = derive([TrialBalanceEntry("Rent Expense", debit=Decimal("10"))])

    # Rent Expense is not part of any line item group
    assert values.net_profit == Decimal("0")

    values = derive([TrialBalanceEntry("Salaries & Wages", debit=Decimal("1000"))])
    assert values.net_profit == Decimal("-1000")
    assert values.taxable_income == Decimal("0")


def test_derive_groups_use_absolute_net():
    entries = [
        TrialBalanceEntry("Interest Income", credit=Decimal("300")),
        TrialBalanceEntry("Interest from Related Parties", credit=Decimal("200")),
        TrialBalanceEntry("Interest Expense", debit=Decimal("100")),
        TrialBalanceEntry("Accounts Payable", credit=Decimal("700")),
        TrialBalanceEntry("Long-Term Loans", credit=Decimal("300")),
    ]

    values = derive(entries)

    assert values.interest_income == Decimal("500")
    assert values.net_interest == Decimal("400")
    assert values.total_liabilities == Decimal("1000")


def test_derive_first_row_wins():
    entries = [
        TrialBalanceEntry("Sales Revenue", credit=Decimal("100")),
        TrialBalanceEntry("Sales Revenue", credit=Decimal("900")),
    ]
    assert derive(entries).operating_revenue == Decimal("100")


def test_derive_empty_is_all_zero():
    assert derive([]) == FtaFormValues()


def test_relief_zeroes_everything_but_actual_revenue(balanced_trial_balance):
    values = derive(balanced_trial_balance, relief_claimed=True)

    for field in fields(values):
        if field.name == "actual_operating_revenue":
            assert getattr(values, field.name) == Decimal("500000")
        else:
            assert getattr(values, field.name) == Decimal("0")


def test_apply_relief_matches_derive(balanced_trial_balance):
    assert apply_relief(derive(balanced_trial_balance)) == derive(
        balanced_trial_balance, relief_claimed=True
    )


def test_as_rows_in_report_order(balanced_trial_balance):
    rows = as_rows(derive(balanced_trial_balance))

    assert len(rows) == len(REPORT_LINES)
    assert rows[0] == ("Statement of Profit or Loss", "Operating Revenue", Decimal("500000"))
    assert rows[-1] == ("Tax Summary", "Corporate Tax Liability", Decimal("0"))
