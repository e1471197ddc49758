"""File-backed extraction and categorization services."""

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import structlog

from ctfiling.domain.entities import Transaction
from ctfiling.domain.errors import ExternalServiceError, service_failed
from ctfiling.integrations.base import DocumentExtractor, TransactionCategorizer

logger = structlog.get_logger(__name__)


def _load_json_object(path: str, service: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ExternalServiceError(service_failed(service, e)) from e
    if not isinstance(data, dict):
        raise ExternalServiceError(
            service_failed(service, ValueError(f"{Path(path).name} does not contain a JSON object"))
        )
    return data


class JsonDocumentExtractor(DocumentExtractor):
    """Reads pre-extracted figures from JSON documents.

    Each document holds one JSON object; objects are merged in order, so a
    later document overrides keys of an earlier one.
    """

    service_name = "Document extraction"

    def extract(self, documents: Sequence[str]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for document in documents:
            merged.update(_load_json_object(document, self.service_name))
        logger.debug("documents_extracted", documents=len(documents), keys=len(merged))
        return merged


class KeywordCategorizer(TransactionCategorizer):
    """Assigns categories by description keywords.

    Rules map a case-insensitive keyword to a category (free text or a
    category path). The first matching rule wins; rows matching no rule
    keep their current category.
    """

    service_name = "Categorization"

    def __init__(self, rules: Mapping[str, str]):
        """Initialize keyword categorizer.

        Args:
            rules: Keyword -> category map, applied in order
        """
        self.rules = [(keyword.lower(), category) for keyword, category in rules.items() if keyword]

    @classmethod
    def from_file(cls, rules_file: str) -> "KeywordCategorizer":
        """Load rules from a JSON object file.

        Raises:
            ExternalServiceError: If the file cannot be read or parsed
        """
        data = _load_json_object(rules_file, cls.service_name)
        return cls({str(k): str(v) for k, v in data.items()})

    def _match(self, description: str) -> Optional[str]:
        lowered = (description or "").lower()
        for keyword, category in self.rules:
            if keyword in lowered:
                return category
        return None

    def categorize(self, transactions: Sequence[Transaction]) -> list[Transaction]:
        result = []
        matched = 0
        for txn in transactions:
            category = self._match(txn.description)
            if category is None:
                result.append(txn)
            else:
                result.append(replace(txn, category=category))
                matched += 1
        logger.info("transactions_categorized", rows=len(result), matched=matched)
        return result
