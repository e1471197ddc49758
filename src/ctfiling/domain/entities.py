"""Domain model entities for ctfiling.

These are plain data classes representing filing concepts, independent of
how a session is persisted. Money is always Decimal.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")

UNCATEGORIZED = "UNCATEGORIZED"
TOTALS_ACCOUNT = "Totals"
BANK_ACCOUNTS = "Bank Accounts"
SHARE_CAPITAL_ACCOUNT = "Share Capital / Owner’s Equity"


@dataclass(frozen=True)
class Transaction:
    """Bank statement transaction domain entity."""

    date: Optional[date]
    description: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    balance: Optional[Decimal] = None
    category: str = UNCATEGORIZED
    source_file: Optional[str] = None
    confidence: Optional[int] = None
    currency: Optional[str] = None

    @property
    def is_uncategorized(self) -> bool:
        return not self.category or UNCATEGORIZED.lower() in self.category.lower()


@dataclass(frozen=True)
class BankStatementSummary:
    """Reported opening and closing balance of one statement file."""

    opening_balance: Decimal = ZERO
    closing_balance: Decimal = ZERO


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one statement file against its transactions."""

    file_name: str
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    calculated_closing: Decimal
    closing_balance: Decimal
    is_valid: bool
    diff: Decimal


@dataclass(frozen=True)
class CategorySummary:
    """Debit and credit movement of one leaf category."""

    category: str
    debit: Decimal
    credit: Decimal


@dataclass
class OpeningBalanceAccount:
    """Seed balance of one balance-sheet account."""

    name: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    sub_category: Optional[str] = None
    is_new: bool = False


@dataclass
class OpeningBalanceCategory:
    """Opening balance section (Assets, Liabilities or Equity)."""

    category: str
    accounts: list[OpeningBalanceAccount] = field(default_factory=list)


_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class AccountKey:
    """Interned account-name key.

    Two keys are equal when their names match ignoring case and runs of
    whitespace; ``name`` keeps the spelling first seen for display.
    """

    value: str
    name: str = field(compare=False)

    @classmethod
    def of(cls, name: str) -> "AccountKey":
        display = _WHITESPACE.sub(" ", name.strip())
        return cls(value=display.casefold(), name=display)

    @property
    def is_totals(self) -> bool:
        return self.value == TOTALS_ACCOUNT.casefold()


@dataclass(frozen=True)
class TrialBalanceEntry:
    """Trial balance row."""

    account: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.debit - self.credit


@dataclass(frozen=True)
class BreakdownEntry:
    """Working note line backing one trial balance account."""

    description: str = ""
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def is_blank(self) -> bool:
        return not self.description.strip() and self.debit == 0 and self.credit == 0


@dataclass(frozen=True)
class VatFileResult:
    """Totals extracted from one VAT return document."""

    file_name: str
    sales_total: Decimal = ZERO
    expenses_total: Decimal = ZERO
    period_from: Optional[str] = None
    period_to: Optional[str] = None


@dataclass(frozen=True)
class MutationRecord:
    """One entry of a session's mutation log."""

    stage: int
    action: str
    detail: str = ""


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a workflow transition request."""

    allowed: bool
    stage: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class FtaFormValues:
    """Figures of the corporate tax return, derived from a trial balance."""

    # Statement of profit or loss
    operating_revenue: Decimal = ZERO
    deriving_revenue_expenses: Decimal = ZERO
    gross_profit: Decimal = ZERO
    salaries: Decimal = ZERO
    depreciation: Decimal = ZERO
    fines: Decimal = ZERO
    donations: Decimal = ZERO
    entertainment: Decimal = ZERO
    other_expenses: Decimal = ZERO
    non_op_expenses_excl: Decimal = ZERO
    dividends_received: Decimal = ZERO
    other_non_op_revenue: Decimal = ZERO
    interest_income: Decimal = ZERO
    interest_expense: Decimal = ZERO
    net_interest: Decimal = ZERO
    gain_asset_disposal: Decimal = ZERO
    loss_asset_disposal: Decimal = ZERO
    net_gains_asset: Decimal = ZERO
    forex_gain: Decimal = ZERO
    forex_loss: Decimal = ZERO
    net_forex: Decimal = ZERO
    net_profit: Decimal = ZERO

    # Other comprehensive income (reserved, always zero)
    oci_income_no_rec: Decimal = ZERO
    oci_loss_no_rec: Decimal = ZERO
    oci_income_rec: Decimal = ZERO
    oci_loss_rec: Decimal = ZERO
    oci_other_income: Decimal = ZERO
    oci_other_loss: Decimal = ZERO
    total_comprehensive_income: Decimal = ZERO

    # Statement of financial position
    total_current_assets: Decimal = ZERO
    ppe: Decimal = ZERO
    intangible_assets: Decimal = ZERO
    financial_assets: Decimal = ZERO
    other_non_current_assets: Decimal = ZERO
    total_non_current_assets: Decimal = ZERO
    total_assets: Decimal = ZERO
    total_current_liabilities: Decimal = ZERO
    total_non_current_liabilities: Decimal = ZERO
    total_liabilities: Decimal = ZERO
    share_capital: Decimal = ZERO
    retained_earnings: Decimal = ZERO
    other_equity: Decimal = ZERO
    total_equity: Decimal = ZERO
    total_equity_liabilities: Decimal = ZERO

    # Tax computation
    taxable_income: Decimal = ZERO
    corporate_tax_liability: Decimal = ZERO

    # Revenue before any relief override, kept for eligibility checks
    actual_operating_revenue: Decimal = ZERO
