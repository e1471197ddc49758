"""Corporate tax return figures derived from a trial balance.

``derive`` is a pure, total function: accounts missing from the trial
balance contribute zero and nothing here raises. Every line item is the
absolute value of the net (debit - credit) of a fixed group of accounts.
"""

from dataclasses import fields, replace
from decimal import Decimal
from typing import Iterable, Union

from ctfiling.domain.entities import ZERO, FtaFormValues, TrialBalanceEntry
from ctfiling.domain.trial_balance import TrialBalance

SMALL_BUSINESS_THRESHOLD = Decimal("375000")
CORPORATE_TAX_RATE = Decimal("0.09")

# Line item account groups, matched by exact account name
REVENUE = ("Sales Revenue", "Sales to related Parties")
COST_OF_REVENUE = ("Direct Cost (COGS)", "Purchases from Related Parties")
SALARIES = ("Salaries & Wages", "Staff Benefits")
DEPRECIATION = ("Depreciation", "Amortization – Intangibles")
FINES = ("Fines and penalties",)
DONATIONS = ("Donations",)
ENTERTAINMENT = ("Travel & Entertainment", "Client entertainment expenses")
OTHER_EXPENSES = (
    "Office Supplies & Stationery",
    "Repairs & Maintenance",
    "Insurance Expense",
    "Marketing & Advertising",
    "Professional Fees",
    "Legal Fees",
    "IT & Software Subscriptions",
    "Fuel Expenses",
    "Transportation & Logistics",
    "Bank Charges",
    "VAT Expense (non-recoverable)",
    "Corporate Tax Expense",
    "Government Fees & Licenses",
    "Bad Debt Expense",
    "Miscellaneous Expense",
)
DIVIDENDS_RECEIVED = ("Dividends received",)
OTHER_NON_OP_REVENUE = ("Other non-operating Revenue", "Other Operating Income")
INTEREST_INCOME = ("Interest Income", "Interest from Related Parties")
INTEREST_EXPENSE = ("Interest Expense", "Interest to Related Parties")
GAIN_ASSET_DISPOSAL = ("Gains on disposal of assets",)
LOSS_ASSET_DISPOSAL = ("Losses on disposal of assets",)
FOREX_GAIN = ("Foreign exchange gains",)
FOREX_LOSS = ("Foreign exchange losses",)

CURRENT_ASSETS = (
    "Cash on Hand",
    "Bank Accounts",
    "Accounts Receivable",
    "Due from related Parties",
    "Prepaid Expenses",
    "Deposits",
    "VAT Recoverable (Input VAT)",
    "Inventory – Goods",
    "Work-in-Progress – Services",
)
PPE = ("Property, Plant & Equipment", "Furniture & Equipment", "Vehicles")
INTANGIBLE_ASSETS = ("Intangibles (Software, Patents)",)
FINANCIAL_ASSETS = ("Investments in Subsidiaries/Associates",)
OTHER_NON_CURRENT_ASSETS = ("Loans to related parties",)
CURRENT_LIABILITIES = (
    "Accounts Payable",
    "Due to Related Parties",
    "Accrued Expenses",
    "Advances from Customers",
    "Short-Term Loans",
    "VAT Payable (Output VAT)",
    "Corporate Tax Payable",
)
NON_CURRENT_LIABILITIES = (
    "Long-Term Liabilities",
    "Long-Term Loans",
    "Loans from Related Parties",
    "Employee End-of-Service Benefits Provision",
)
SHARE_CAPITAL = ("Share Capital / Owner’s Equity",)
RETAINED_EARNINGS = ("Retained Earnings", "Current Year Profit/Loss")
OTHER_EQUITY = ("Dividends / Owner’s Drawings", "Owner's Current Account")

# Kept by the relief override
RELIEF_PRESERVED_FIELDS = frozenset({"actual_operating_revenue"})

TrialBalanceInput = Union[TrialBalance, Iterable[TrialBalanceEntry]]


def _net_by_account(trial_balance: TrialBalanceInput) -> dict[str, Decimal]:
    entries = trial_balance.entries() if isinstance(trial_balance, TrialBalance) else trial_balance
    nets: dict[str, Decimal] = {}
    for entry in entries:
        # First row with a given name wins
        nets.setdefault(entry.account, entry.debit - entry.credit)
    return nets


def compute_corporate_tax(taxable_income: Decimal) -> Decimal:
    """Corporate tax on the part of taxable income above the threshold."""
    if taxable_income > SMALL_BUSINESS_THRESHOLD:
        return (taxable_income - SMALL_BUSINESS_THRESHOLD) * CORPORATE_TAX_RATE
    return ZERO


def apply_relief(values: FtaFormValues) -> FtaFormValues:
    """Zero every figure except the preserved revenue reference."""
    return replace(
        values,
        **{f.name: ZERO for f in fields(values) if f.name not in RELIEF_PRESERVED_FIELDS},
    )


def derive(trial_balance: TrialBalanceInput, relief_claimed: bool = False) -> FtaFormValues:
    """Derive the return figures from a trial balance.

    Args:
        trial_balance: TrialBalance or an iterable of entries
        relief_claimed: Whether Small Business Relief is elected

    Returns:
        FtaFormValues; when relief is claimed every field is zero except
        actual_operating_revenue
    """
    nets = _net_by_account(trial_balance)

    def total(labels: Iterable[str]) -> Decimal:
        return abs(sum((nets.get(label, ZERO) for label in labels), ZERO))

    operating_revenue = total(REVENUE)
    deriving_revenue_expenses = total(COST_OF_REVENUE)
    gross_profit = operating_revenue - deriving_revenue_expenses

    salaries = total(SALARIES)
    depreciation = total(DEPRECIATION)
    fines = total(FINES)
    donations = total(DONATIONS)
    entertainment = total(ENTERTAINMENT)
    other_expenses = total(OTHER_EXPENSES)
    non_op_expenses_excl = salaries + depreciation + fines + donations + entertainment + other_expenses

    dividends_received = total(DIVIDENDS_RECEIVED)
    other_non_op_revenue = total(OTHER_NON_OP_REVENUE)

    interest_income = total(INTEREST_INCOME)
    interest_expense = total(INTEREST_EXPENSE)
    net_interest = interest_income - interest_expense

    gain_asset_disposal = total(GAIN_ASSET_DISPOSAL)
    loss_asset_disposal = total(LOSS_ASSET_DISPOSAL)
    net_gains_asset = gain_asset_disposal - loss_asset_disposal

    forex_gain = total(FOREX_GAIN)
    forex_loss = total(FOREX_LOSS)
    net_forex = forex_gain - forex_loss

    net_profit = (
        gross_profit
        - non_op_expenses_excl
        + dividends_received
        + other_non_op_revenue
        + net_interest
        + net_gains_asset
        + net_forex
    )

    # Other comprehensive income lines are not captured yet
    oci_income_no_rec = oci_loss_no_rec = ZERO
    oci_income_rec = oci_loss_rec = ZERO
    oci_other_income = oci_other_loss = ZERO
    total_comprehensive_income = (
        net_profit
        + oci_income_no_rec
        - oci_loss_no_rec
        + oci_income_rec
        - oci_loss_rec
        + oci_other_income
        - oci_other_loss
    )

    total_current_assets = total(CURRENT_ASSETS)
    ppe = total(PPE)
    intangible_assets = total(INTANGIBLE_ASSETS)
    financial_assets = total(FINANCIAL_ASSETS)
    other_non_current_assets = total(OTHER_NON_CURRENT_ASSETS)
    total_non_current_assets = ppe + intangible_assets + financial_assets + other_non_current_assets
    total_assets = total_current_assets + total_non_current_assets

    total_current_liabilities = total(CURRENT_LIABILITIES)
    total_non_current_liabilities = total(NON_CURRENT_LIABILITIES)
    total_liabilities = total_current_liabilities + total_non_current_liabilities

    share_capital = total(SHARE_CAPITAL)
    retained_earnings = total(RETAINED_EARNINGS)
    other_equity = total(OTHER_EQUITY)
    total_equity = share_capital + retained_earnings + other_equity
    total_equity_liabilities = total_equity + total_liabilities

    taxable_income = max(ZERO, net_profit)
    corporate_tax_liability = compute_corporate_tax(taxable_income)

    values = FtaFormValues(
        operating_revenue=operating_revenue,
        deriving_revenue_expenses=deriving_revenue_expenses,
        gross_profit=gross_profit,
        salaries=salaries,
        depreciation=depreciation,
        fines=fines,
        donations=donations,
        entertainment=entertainment,
        other_expenses=other_expenses,
        non_op_expenses_excl=non_op_expenses_excl,
        dividends_received=dividends_received,
        other_non_op_revenue=other_non_op_revenue,
        interest_income=interest_income,
        interest_expense=interest_expense,
        net_interest=net_interest,
        gain_asset_disposal=gain_asset_disposal,
        loss_asset_disposal=loss_asset_disposal,
        net_gains_asset=net_gains_asset,
        forex_gain=forex_gain,
        forex_loss=forex_loss,
        net_forex=net_forex,
        net_profit=net_profit,
        oci_income_no_rec=oci_income_no_rec,
        oci_loss_no_rec=oci_loss_no_rec,
        oci_income_rec=oci_income_rec,
        oci_loss_rec=oci_loss_rec,
        oci_other_income=oci_other_income,
        oci_other_loss=oci_other_loss,
        total_comprehensive_income=total_comprehensive_income,
        total_current_assets=total_current_assets,
        ppe=ppe,
        intangible_assets=intangible_assets,
        financial_assets=financial_assets,
        other_non_current_assets=other_non_current_assets,
        total_non_current_assets=total_non_current_assets,
        total_assets=total_assets,
        total_current_liabilities=total_current_liabilities,
        total_non_current_liabilities=total_non_current_liabilities,
        total_liabilities=total_liabilities,
        share_capital=share_capital,
        retained_earnings=retained_earnings,
        other_equity=other_equity,
        total_equity=total_equity,
        total_equity_liabilities=total_equity_liabilities,
        taxable_income=taxable_income,
        corporate_tax_liability=corporate_tax_liability,
        actual_operating_revenue=operating_revenue,
    )
    return apply_relief(values) if relief_claimed else values


# Report layout: (section, label, field)
REPORT_LINES = (
    ("Statement of Profit or Loss", "Operating Revenue", "operating_revenue"),
    ("Statement of Profit or Loss", "Expenditure in Deriving Operating Revenue", "deriving_revenue_expenses"),
    ("Statement of Profit or Loss", "Gross Profit / Loss", "gross_profit"),
    ("Statement of Profit or Loss", "Salaries, Wages and Related Charges", "salaries"),
    ("Statement of Profit or Loss", "Depreciation and Amortisation", "depreciation"),
    ("Statement of Profit or Loss", "Fines and Penalties", "fines"),
    ("Statement of Profit or Loss", "Donations", "donations"),
    ("Statement of Profit or Loss", "Client Entertainment Expenses", "entertainment"),
    ("Statement of Profit or Loss", "Other Expenses", "other_expenses"),
    ("Statement of Profit or Loss", "Non-Operating Expenses (Excluding Other Items)", "non_op_expenses_excl"),
    ("Statement of Profit or Loss", "Dividends Received", "dividends_received"),
    ("Statement of Profit or Loss", "Other Non-Operating Revenue", "other_non_op_revenue"),
    ("Statement of Profit or Loss", "Interest Income", "interest_income"),
    ("Statement of Profit or Loss", "Interest Expenditure", "interest_expense"),
    ("Statement of Profit or Loss", "Net Interest Income / Expenditure", "net_interest"),
    ("Statement of Profit or Loss", "Gains on Disposal of Assets", "gain_asset_disposal"),
    ("Statement of Profit or Loss", "Losses on Disposal of Assets", "loss_asset_disposal"),
    ("Statement of Profit or Loss", "Net Gains / Losses on Disposal of Assets", "net_gains_asset"),
    ("Statement of Profit or Loss", "Foreign Exchange Gains", "forex_gain"),
    ("Statement of Profit or Loss", "Foreign Exchange Losses", "forex_loss"),
    ("Statement of Profit or Loss", "Net Foreign Exchange Gains / Losses", "net_forex"),
    ("Statement of Profit or Loss", "Net Profit / Loss", "net_profit"),
    ("Other Comprehensive Income", "Income Not Reclassified to Profit or Loss", "oci_income_no_rec"),
    ("Other Comprehensive Income", "Losses Not Reclassified to Profit or Loss", "oci_loss_no_rec"),
    ("Other Comprehensive Income", "Income Reclassified to Profit or Loss", "oci_income_rec"),
    ("Other Comprehensive Income", "Losses Reclassified to Profit or Loss", "oci_loss_rec"),
    ("Other Comprehensive Income", "Other Income", "oci_other_income"),
    ("Other Comprehensive Income", "Other Losses", "oci_other_loss"),
    ("Other Comprehensive Income", "Total Comprehensive Income", "total_comprehensive_income"),
    ("Statement of Financial Position", "Total Current Assets", "total_current_assets"),
    ("Statement of Financial Position", "Property, Plant and Equipment", "ppe"),
    ("Statement of Financial Position", "Intangible Assets", "intangible_assets"),
    ("Statement of Financial Position", "Financial Assets", "financial_assets"),
    ("Statement of Financial Position", "Other Non-Current Assets", "other_non_current_assets"),
    ("Statement of Financial Position", "Total Non-Current Assets", "total_non_current_assets"),
    ("Statement of Financial Position", "Total Assets", "total_assets"),
    ("Statement of Financial Position", "Total Current Liabilities", "total_current_liabilities"),
    ("Statement of Financial Position", "Total Non-Current Liabilities", "total_non_current_liabilities"),
    ("Statement of Financial Position", "Total Liabilities", "total_liabilities"),
    ("Statement of Financial Position", "Share Capital", "share_capital"),
    ("Statement of Financial Position", "Retained Earnings", "retained_earnings"),
    ("Statement of Financial Position", "Other Equity", "other_equity"),
    ("Statement of Financial Position", "Total Equity", "total_equity"),
    ("Statement of Financial Position", "Total Equity and Liabilities", "total_equity_liabilities"),
    ("Tax Summary", "Taxable Income / Tax Loss for the Tax Period", "taxable_income"),
    ("Tax Summary", "Corporate Tax Liability", "corporate_tax_liability"),
)


def as_rows(values: FtaFormValues) -> list[tuple[str, str, Decimal]]:
    """Flatten derived figures into (section, label, value) rows in report order."""
    return [(section, label, getattr(values, name)) for section, label, name in REPORT_LINES]
