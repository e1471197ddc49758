"""Output formatting helpers shared by commands."""

from decimal import Decimal
from typing import Optional


def format_amount(value: Optional[Decimal]) -> str:
    """Format money with thousands separators and two decimals."""
    if value is None:
        return "-"
    return f"{value:,.2f}"


def truncate(text: str, width: int) -> str:
    """Shorten text to a column width."""
    text = text or ""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."
