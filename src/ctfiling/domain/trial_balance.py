"""Trial balance aggregation and adjustment.

The trial balance joins opening balances, categorized statement movements
and the reconciled bank position into one account -> (debit, credit)
table. Accounts are joined by AccountKey, so "bank accounts" and
"Bank  Accounts" are the same row. The Totals row is never stored: it is
derived from the other rows whenever entries are read, so it is always
last and always equal to the column sums.
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

import structlog

from ctfiling.domain.entities import (
    BANK_ACCOUNTS,
    SHARE_CAPITAL_ACCOUNT,
    TOTALS_ACCOUNT,
    ZERO,
    AccountKey,
    BreakdownEntry,
    CategorySummary,
    TrialBalanceEntry,
)
from ctfiling.domain.errors import ValidationError
from ctfiling.utils.amount_parser import to_amount

logger = structlog.get_logger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")
CELL_FIELDS = ("debit", "credit")


class TrialBalance:
    """Account table of one filing session, with working-note breakdowns."""

    def __init__(
        self,
        entries: Iterable[TrialBalanceEntry] = (),
        breakdowns: Optional[Mapping[str, Iterable[BreakdownEntry]]] = None,
    ):
        """Initialize trial balance.

        Args:
            entries: Rows in display order; any Totals row is dropped and
                recomputed
            breakdowns: Working notes keyed by account name
        """
        self._rows: dict[AccountKey, TrialBalanceEntry] = {}
        for entry in entries:
            key = AccountKey.of(entry.account)
            if key.is_totals:
                continue
            self._rows[key] = entry

        self._breakdowns: dict[AccountKey, list[BreakdownEntry]] = {}
        for account, items in (breakdowns or {}).items():
            items = list(items)
            if items:
                self._breakdowns[AccountKey.of(account)] = items

    @classmethod
    def build(
        cls,
        opening_entries: Iterable[TrialBalanceEntry],
        category_summary: Iterable[CategorySummary],
        bank_closing_balance: Decimal,
        share_capital: Optional[Decimal] = None,
    ) -> "TrialBalance":
        """Aggregate a fresh trial balance.

        Args:
            opening_entries: Opening balance accounts
            category_summary: Debit/credit movement per leaf category
            bank_closing_balance: Sum of the statements' reported closing
                balances; replaces whatever the other inputs say about
                Bank Accounts
            share_capital: Optional share capital from the company profile,
                written as a credit after netting

        Returns:
            TrialBalance holding a single-sided net figure per account
        """
        combined: dict[AccountKey, list] = {}

        for entry in opening_entries:
            if entry.debit == 0 and entry.credit == 0:
                continue
            key = AccountKey.of(entry.account)
            combined[key] = [key.name, entry.debit, entry.credit]

        for item in category_summary:
            key = AccountKey.of(item.category)
            if key in combined:
                combined[key][1] += item.debit
                combined[key][2] += item.credit
            else:
                combined[key] = [key.name, item.debit, item.credit]

        bank_key = AccountKey.of(BANK_ACCOUNTS)
        if bank_closing_balance >= 0:
            combined[bank_key] = [BANK_ACCOUNTS, bank_closing_balance, ZERO]
        else:
            combined[bank_key] = [BANK_ACCOUNTS, ZERO, abs(bank_closing_balance)]

        entries = []
        for name, debit, credit in combined.values():
            net = debit - credit
            entries.append(
                TrialBalanceEntry(
                    account=name,
                    debit=net if net > 0 else ZERO,
                    credit=-net if net < 0 else ZERO,
                )
            )

        trial_balance = cls(entries)
        if share_capital is not None and share_capital > 0:
            trial_balance._put(SHARE_CAPITAL_ACCOUNT, ZERO, share_capital)

        logger.info(
            "trial_balance_built",
            accounts=len(trial_balance),
            difference=str(trial_balance.difference),
            balanced=trial_balance.is_balanced,
        )
        return trial_balance

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, account: str) -> bool:
        return AccountKey.of(account) in self._rows

    def _put(self, account: str, debit: Decimal, credit: Decimal) -> TrialBalanceEntry:
        key = AccountKey.of(account)
        existing = self._rows.get(key)
        name = existing.account if existing is not None else key.name
        entry = TrialBalanceEntry(account=name, debit=debit, credit=credit)
        # Existing rows keep their position; new rows land just before Totals
        self._rows[key] = entry
        return entry

    def get(self, account: str) -> Optional[TrialBalanceEntry]:
        """Get an account row by name (case-insensitive), or None."""
        key = AccountKey.of(account)
        if key.is_totals:
            return self.totals
        return self._rows.get(key)

    @property
    def rows(self) -> list[TrialBalanceEntry]:
        """Account rows without the Totals row."""
        return list(self._rows.values())

    @property
    def totals(self) -> TrialBalanceEntry:
        return TrialBalanceEntry(
            account=TOTALS_ACCOUNT,
            debit=sum((row.debit for row in self._rows.values()), ZERO),
            credit=sum((row.credit for row in self._rows.values()), ZERO),
        )

    def entries(self) -> list[TrialBalanceEntry]:
        """Account rows followed by the Totals row."""
        return self.rows + [self.totals]

    @property
    def difference(self) -> Decimal:
        totals = self.totals
        return totals.debit - totals.credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < BALANCE_TOLERANCE

    def set_cell(self, account: str, field: str, value: Any) -> TrialBalanceEntry:
        """Overwrite one cell, inserting the account if needed.

        Malformed values are stored as zero. Edits to the Totals row are
        ignored since Totals is always recomputed.

        Args:
            account: Account name
            field: "debit" or "credit"
            value: New value (number or numeric string)

        Returns:
            The updated row (or the Totals row when Totals was targeted)

        Raises:
            ValidationError: If field is not "debit" or "credit"
        """
        if field not in CELL_FIELDS:
            raise ValidationError(f"Field must be 'debit' or 'credit', got '{field}'")
        if AccountKey.of(account).is_totals:
            logger.warning("totals_edit_ignored", field=field)
            return self.totals

        amount = to_amount(value)
        existing = self.get(account)
        debit = existing.debit if existing is not None else ZERO
        credit = existing.credit if existing is not None else ZERO
        if field == "debit":
            debit = amount
        else:
            credit = amount
        return self._put(account, debit, credit)

    def save_breakdown(
        self, account: str, entries: Iterable[BreakdownEntry]
    ) -> list[BreakdownEntry]:
        """Store a working note and force the account to its sums.

        Entries with a blank description and zero amounts are dropped. Saving
        an empty list removes the working note and writes zero sums.

        Args:
            account: Account name
            entries: Working note lines

        Returns:
            The stored (filtered) entries; empty when Totals was targeted
        """
        if AccountKey.of(account).is_totals:
            logger.warning("totals_breakdown_ignored")
            return []

        kept = [
            BreakdownEntry(
                description=entry.description or "",
                debit=to_amount(entry.debit),
                credit=to_amount(entry.credit),
            )
            for entry in entries
        ]
        kept = [entry for entry in kept if not entry.is_blank]

        key = AccountKey.of(account)
        if kept:
            self._breakdowns[key] = kept
        else:
            self._breakdowns.pop(key, None)

        debit = sum((entry.debit for entry in kept), ZERO)
        credit = sum((entry.credit for entry in kept), ZERO)
        self._put(account, debit, credit)
        logger.info("breakdown_saved", account=account, lines=len(kept))
        return list(kept)

    def has_breakdown(self, account: str) -> bool:
        """Check whether an account's figures come from a working note."""
        return AccountKey.of(account) in self._breakdowns

    def breakdown(self, account: str) -> list[BreakdownEntry]:
        """Get an account's working note lines (empty if none)."""
        return list(self._breakdowns.get(AccountKey.of(account), []))

    @property
    def breakdowns(self) -> dict[str, list[BreakdownEntry]]:
        """Working notes keyed by display account name."""
        result = {}
        for key, items in self._breakdowns.items():
            row = self._rows.get(key)
            result[row.account if row is not None else key.name] = list(items)
        return result

    def add_account(self, name: str) -> bool:
        """Insert an empty account just before Totals.

        Returns:
            True if added, False if the name is blank or already present
        """
        if not name or not name.strip():
            return False
        key = AccountKey.of(name)
        if key.is_totals or key in self._rows:
            return False
        self._put(name, ZERO, ZERO)
        return True
