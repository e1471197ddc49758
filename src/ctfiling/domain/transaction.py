"""Transaction ledger domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

import structlog

from ctfiling.domain.category import CategoryResolver, child_category, default_resolver
from ctfiling.domain.entities import (
    UNCATEGORIZED,
    ZERO,
    CategorySummary,
    Transaction,
)
from ctfiling.domain.errors import NotFoundError, transaction_index_out_of_range

logger = structlog.get_logger(__name__)

ALL = "ALL"


class TransactionLedger:
    """In-memory list of statement transactions and their categories.

    Rows are addressed by position. Mutations are last-write-wins; there is
    no undo.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        resolver: Optional[CategoryResolver] = None,
        selection: Iterable[int] = (),
    ):
        """Initialize transaction ledger.

        Args:
            transactions: Initial rows, stored as given
            resolver: Category resolver (defaults to the fixed chart)
            selection: Initially selected row indices
        """
        self.resolver = resolver or default_resolver()
        self._transactions: list[Transaction] = list(transactions)
        self.selection: set[int] = {i for i in selection if 0 <= i < len(self._transactions)}

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def __getitem__(self, index: int) -> Transaction:
        return self._transactions[self._check_index(index)]

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._transactions):
            raise NotFoundError(transaction_index_out_of_range(index, len(self._transactions)))
        return index

    def _resolved(self, transactions: Iterable[Transaction]) -> list[Transaction]:
        return [replace(t, category=self.resolver.resolve(t.category)) for t in transactions]

    def ingest(self, transactions: Iterable[Transaction]) -> None:
        """Replace the ledger contents, resolving every category.

        Args:
            transactions: Extracted transactions with raw category strings
        """
        self._transactions = self._resolved(transactions)
        self.selection = set()
        logger.info(
            "ledger_ingested",
            rows=len(self._transactions),
            uncategorized=self.uncategorized_count(),
        )

    def extend(self, transactions: Iterable[Transaction]) -> int:
        """Append transactions from another statement, resolving their categories.

        Returns:
            Number of rows added
        """
        added = self._resolved(transactions)
        self._transactions.extend(added)
        return len(added)

    def set_category(self, index: int, path: str) -> None:
        """Replace one row's category. The path is stored as given.

        Raises:
            NotFoundError: If the index is outside the ledger
        """
        self._check_index(index)
        self._transactions[index] = replace(self._transactions[index], category=path)

    def select(self, indices: Iterable[int]) -> set[int]:
        """Store a row selection, ignoring indices outside the ledger."""
        self.selection = {i for i in indices if 0 <= i < len(self._transactions)}
        return set(self.selection)

    def bulk_apply(self, indices: Optional[Iterable[int]], path: str) -> int:
        """Apply one category to a set of rows.

        Args:
            indices: Row indices to change; None uses the stored selection
            path: Category path to store

        Returns:
            Number of rows changed (0 when nothing was selected or path is empty)
        """
        targets = self.selection if indices is None else set(indices)
        targets = {i for i in targets if 0 <= i < len(self._transactions)}
        if not path or not targets:
            return 0

        for index in targets:
            self._transactions[index] = replace(self._transactions[index], category=path)
        self.selection = set()
        return len(targets)

    def find_and_replace(self, find_text: str, path: str) -> int:
        """Re-categorize every row whose description contains some text.

        Args:
            find_text: Case-insensitive substring to look for in descriptions
            path: Category path to store on matching rows

        Returns:
            Number of rows changed; 0 when either argument is empty
        """
        if not find_text or not path:
            return 0

        needle = find_text.lower()
        count = 0
        for index, txn in enumerate(self._transactions):
            if needle in (txn.description or "").lower():
                self._transactions[index] = replace(txn, category=path)
                count += 1
        return count

    def delete(self, index: int) -> Transaction:
        """Delete one row and shift the stored selection to match.

        Raises:
            NotFoundError: If the index is outside the ledger
        """
        self._check_index(index)
        removed = self._transactions.pop(index)
        self.selection = {
            i if i < index else i - 1 for i in self.selection if i != index
        }
        return removed

    def apply_categorization(self, categorized: Sequence[Transaction]) -> int:
        """Accept a categorization result, re-validating every category.

        Args:
            categorized: Transactions returned by the categorization service

        Returns:
            Number of rows still uncategorized afterwards
        """
        self._transactions = self._resolved(categorized)
        self.selection = {i for i in self.selection if i < len(self._transactions)}
        return self.uncategorized_count()

    def filter(
        self,
        search: str = "",
        category: str = ALL,
        source_file: str = ALL,
    ) -> list[tuple[int, Transaction]]:
        """Filter rows, keeping each row's ledger index.

        Args:
            search: Case-insensitive substring of the description
            category: ALL, UNCATEGORIZED, or a category path
            source_file: ALL or a statement file name

        Returns:
            List of (index, transaction) pairs
        """
        needle = search.lower()
        wanted = None
        if category not in (ALL, UNCATEGORIZED):
            wanted = self.resolver.resolve(category)

        results = []
        for index, txn in enumerate(self._transactions):
            if source_file != ALL and txn.source_file != source_file:
                continue
            if needle not in (txn.description or "").lower():
                continue
            if category == UNCATEGORIZED and not txn.is_uncategorized:
                continue
            if wanted is not None and self.resolver.resolve(txn.category) != wanted:
                continue
            results.append((index, txn))
        return results

    def uncategorized_count(self) -> int:
        """Count rows still carrying the UNCATEGORIZED sentinel."""
        return sum(1 for txn in self._transactions if txn.is_uncategorized)

    def source_files(self) -> list[str]:
        """List statement file names in first-seen order."""
        files: dict[str, None] = {}
        for txn in self._transactions:
            if txn.source_file:
                files.setdefault(txn.source_file)
        return list(files)

    def summarize(self, source_file: Optional[str] = None) -> list[CategorySummary]:
        """Sum debits and credits per leaf category.

        Args:
            source_file: Optional statement file to restrict the summary to

        Returns:
            Category summaries sorted by category name
        """
        groups: dict[str, tuple[Decimal, Decimal]] = {}
        for txn in self._transactions:
            if source_file is not None and source_file != ALL and txn.source_file != source_file:
                continue
            name = child_category(txn.category or "(blank)")
            debit, credit = groups.get(name, (ZERO, ZERO))
            groups[name] = (debit + (txn.debit or ZERO), credit + (txn.credit or ZERO))

        return [
            CategorySummary(category=name, debit=debit, credit=credit)
            for name, (debit, credit) in sorted(groups.items(), key=lambda item: item[0].casefold())
        ]
