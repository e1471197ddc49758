"""Abstract extraction and categorization services."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from ctfiling.domain.entities import Transaction


class DocumentExtractor(ABC):
    """Extracts key/value figures from uploaded documents."""

    @abstractmethod
    def extract(self, documents: Sequence[str]) -> dict[str, Any]:
        """Extract figures from documents.

        Args:
            documents: Document paths

        Returns:
            Free-form key -> value map (values are numbers or strings)

        Raises:
            ExternalServiceError: If extraction fails
        """
        pass


class TransactionCategorizer(ABC):
    """Suggests categories for ledger transactions."""

    @abstractmethod
    def categorize(self, transactions: Sequence[Transaction]) -> list[Transaction]:
        """Return the transactions with suggested categories.

        The result has the same length and order as the input. Categories
        may be free text; the ledger re-resolves every one of them.

        Raises:
            ExternalServiceError: If categorization fails
        """
        pass
