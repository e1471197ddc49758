"""Category resolution against the chart of accounts."""

import re
from functools import lru_cache
from typing import Iterable, Optional

import structlog

from ctfiling.domain.chart_of_accounts import (
    CHART_OF_ACCOUNTS,
    ChartLeaf,
    ChartSection,
    PATH_SEPARATOR,
    iter_leaves,
)
from ctfiling.domain.entities import UNCATEGORIZED

logger = structlog.get_logger(__name__)

_DASHES = re.compile(r"[–—]")
_QUOTES = re.compile(r"['\"“”]")
_WHITESPACE = re.compile(r"\s+")


def normalize_category(value: str) -> str:
    """Normalize a category or account name for comparison.

    Trims, lowercases, unifies en/em dashes to "-", strips quote characters,
    spells "&" as "and" and collapses whitespace runs.
    """
    value = value.strip().lower()
    value = _DASHES.sub("-", value)
    value = _QUOTES.sub("", value)
    value = value.replace("&", "and")
    return _WHITESPACE.sub(" ", value)


def child_category(path: Optional[str]) -> str:
    """Return the leaf (last segment) of a category path."""
    if not path:
        return ""
    return path.split("|")[-1].strip()


class CategoryResolver:
    """Resolves free text and AI suggestions onto canonical category paths."""

    def __init__(self, chart: Optional[dict[str, ChartSection]] = None):
        """Initialize category resolver.

        Args:
            chart: Chart of accounts to resolve against (defaults to the
                fixed CHART_OF_ACCOUNTS)
        """
        self.chart = CHART_OF_ACCOUNTS if chart is None else chart
        self._leaves = [
            (leaf, normalize_category(leaf.name)) for leaf in iter_leaves(self.chart)
        ]

    def resolve(self, category: Optional[str]) -> str:
        """Resolve a category string to a canonical path.

        Args:
            category: Free text, an AI suggestion, or an existing path
                (e.g., "Expenses | OtherExpense | Bank Charges")

        Returns:
            Canonical path using the chart's casing, or UNCATEGORIZED
        """
        if not category or not category.strip() or category == UNCATEGORIZED:
            return UNCATEGORIZED

        if "|" in category:
            leaf = self._find_exact(normalize_category(category.split("|")[-1]))
            if leaf is not None:
                return leaf.path

        normalized = normalize_category(category)
        leaf = self._find_exact(normalized)
        if leaf is not None:
            return leaf.path

        # First match in chart order wins, even when several leaves overlap
        leaf = self._find_partial(normalized)
        if leaf is not None:
            logger.debug("category_partial_match", category=category, resolved=leaf.path)
            return leaf.path

        logger.debug("category_unresolved", category=category)
        return UNCATEGORIZED

    def _find_exact(self, normalized: str) -> Optional[ChartLeaf]:
        for leaf, leaf_normalized in self._leaves:
            if leaf_normalized == normalized:
                return leaf
        return None

    def _find_partial(self, normalized: str) -> Optional[ChartLeaf]:
        if not normalized:
            return None
        for leaf, leaf_normalized in self._leaves:
            if normalized in leaf_normalized or leaf_normalized in normalized:
                return leaf
        return None

    def category_options(self) -> list[str]:
        """List every canonical category path in chart order."""
        return [leaf.path for leaf, _ in self._leaves]

    def is_canonical(self, path: str) -> bool:
        """Check whether a path is exactly one of the chart's canonical paths."""
        return any(leaf.path == path for leaf, _ in self._leaves)

    def validate_choice(self, path: str, custom_categories: Iterable[str] = ()) -> Optional[str]:
        """Return the path to store for a user-chosen category, or None if unknown.

        Accepts UNCATEGORIZED, canonical paths, user-added custom categories,
        and anything that resolves onto the chart.
        """
        if path == UNCATEGORIZED or self.is_canonical(path):
            return path
        if path in set(custom_categories):
            return path
        resolved = self.resolve(path)
        return None if resolved == UNCATEGORIZED else resolved


def custom_category_path(main: str, name: str) -> str:
    """Build the path of a user-added custom category."""
    return f"{main}{PATH_SEPARATOR}{name.strip()}"


@lru_cache
def default_resolver() -> CategoryResolver:
    """Get the cached resolver for the fixed chart of accounts."""
    return CategoryResolver()


def resolve_category_path(category: Optional[str]) -> str:
    """Resolve a category against the fixed chart of accounts."""
    return default_resolver().resolve(category)
