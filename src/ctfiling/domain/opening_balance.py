"""Opening balance domain service."""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

import structlog

from ctfiling.domain.chart_of_accounts import BALANCE_SHEET_SECTIONS, iter_leaves
from ctfiling.domain.entities import (
    ZERO,
    OpeningBalanceAccount,
    OpeningBalanceCategory,
    TrialBalanceEntry,
)
from ctfiling.domain.errors import (
    NotFoundError,
    ValidationError,
    opening_account_not_found,
    opening_category_not_found,
)
from ctfiling.utils.amount_parser import to_amount

logger = structlog.get_logger(__name__)

DEBIT_SECTION = "Assets"


def initial_account_data() -> list[OpeningBalanceCategory]:
    """Seed opening balance sections from the chart of accounts, all zero."""
    return [
        OpeningBalanceCategory(
            category=section,
            accounts=[
                OpeningBalanceAccount(name=leaf.name, sub_category=leaf.sub_group)
                for leaf in iter_leaves(main=section)
            ],
        )
        for section in BALANCE_SHEET_SECTIONS
    ]


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", " ")


class OpeningBalanceSet:
    """Per-account opening debit/credit values of the filing period."""

    def __init__(self, categories: Optional[Iterable[OpeningBalanceCategory]] = None):
        """Initialize opening balance set.

        Args:
            categories: Existing sections; defaults to the chart's balance
                sheet accounts with zero values
        """
        self.categories: list[OpeningBalanceCategory] = (
            list(categories) if categories is not None else initial_account_data()
        )

    def get_category(self, category: str) -> OpeningBalanceCategory:
        """Get an opening balance section by name (case-insensitive).

        Raises:
            NotFoundError: If no such section exists
        """
        for section in self.categories:
            if section.category.lower() == category.strip().lower():
                return section
        raise NotFoundError(opening_category_not_found(category))

    def find_account(self, name: str) -> Optional[tuple[OpeningBalanceCategory, OpeningBalanceAccount]]:
        """Find an account by exact name, falling back to a case-insensitive match."""
        for section in self.categories:
            for account in section.accounts:
                if account.name == name:
                    return section, account
        for section in self.categories:
            for account in section.accounts:
                if account.name.lower() == name.strip().lower():
                    return section, account
        return None

    def set_value(self, name: str, field: str, value: Any) -> OpeningBalanceAccount:
        """Set an account's debit or credit. Malformed values are stored as zero.

        Raises:
            ValidationError: If field is not "debit" or "credit"
            NotFoundError: If the account does not exist
        """
        if field not in ("debit", "credit"):
            raise ValidationError(f"Field must be 'debit' or 'credit', got '{field}'")
        found = self.find_account(name)
        if found is None:
            raise NotFoundError(opening_account_not_found(name))
        _, account = found
        setattr(account, field, to_amount(value))
        return account

    def add_account(self, category: str, name: str) -> Optional[OpeningBalanceAccount]:
        """Add a new account to a section.

        Returns:
            The new account, or None if the section already has one with that name

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the section does not exist
        """
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")
        section = self.get_category(category)
        if any(acc.name.lower() == name.strip().lower() for acc in section.accounts):
            return None
        account = OpeningBalanceAccount(name=name.strip(), is_new=True)
        section.accounts.append(account)
        return account

    def merge_extracted(self, details: Mapping[str, Any]) -> int:
        """Fold an extraction result into the balances.

        Keys are matched against account names across every section (equal,
        key contains name, or name contains key; first hit wins). Assets
        accounts receive the value as a debit, every other section as a
        credit. Zero values and unmatched keys are skipped.

        Args:
            details: Free-form key/value map from the extraction service

        Returns:
            Number of keys applied
        """
        applied = 0
        for key, value in details.items():
            amount = to_amount(value)
            if amount == 0:
                continue

            normalized_key = _normalize_key(str(key))
            match = self._match_account(normalized_key)
            if match is None:
                logger.debug("opening_balance_key_unmatched", key=key)
                continue

            section, account = match
            if section.category == DEBIT_SECTION:
                account.debit = amount
            else:
                account.credit = amount
            applied += 1

        logger.info("opening_balances_merged", keys=len(details), applied=applied)
        return applied

    def _match_account(
        self, normalized_key: str
    ) -> Optional[tuple[OpeningBalanceCategory, OpeningBalanceAccount]]:
        for section in self.categories:
            for account in section.accounts:
                name = account.name.lower()
                if name == normalized_key or name in normalized_key or normalized_key in name:
                    return section, account
        return None

    def apply_share_capital(self, details: Mapping[str, Any]) -> bool:
        """Carry a share capital figure from additional documents into Equity.

        Returns:
            True if a positive share capital value was applied
        """
        value = None
        for key, raw in details.items():
            if "share capital" in _normalize_key(str(key)):
                value = to_amount(raw)
                break
        if value is None or value <= 0:
            return False

        equity = self.get_category("Equity")
        for account in equity.accounts:
            lowered = account.name.lower()
            if "share capital" in lowered or "owner's equity" in lowered:
                account.credit = value
                return True
        equity.accounts.append(
            OpeningBalanceAccount(name="Share Capital", credit=value, is_new=True)
        )
        return True

    def entries(self) -> list[TrialBalanceEntry]:
        """List accounts carrying a non-zero debit or credit."""
        return [
            TrialBalanceEntry(account=acc.name, debit=acc.debit, credit=acc.credit)
            for section in self.categories
            for acc in section.accounts
            if acc.debit != 0 or acc.credit != 0
        ]

    def totals(self) -> tuple[Decimal, Decimal]:
        """Return (total debit, total credit) across every section."""
        accounts = [acc for section in self.categories for acc in section.accounts]
        return (
            sum((acc.debit for acc in accounts), ZERO),
            sum((acc.credit for acc in accounts), ZERO),
        )
