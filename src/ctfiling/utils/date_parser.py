"""Date parsing utilities."""

from datetime import date
from typing import Optional

from dateutil import parser as date_parser


def parse_date(date_str: str, dayfirst: bool = True) -> date:
    """Parse a statement date string into a date object.

    Bank statements in the supported jurisdiction print dates day first
    ("31/01/2024", "31-01-2024", "31.01.2024"); ISO dates parse as usual.

    Args:
        date_str: Date string in various formats
        dayfirst: Interpret ambiguous dates as DD/MM/YYYY

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip()
    if not date_str:
        raise ValueError("Empty date string")

    # ISO dates are never day first
    if len(date_str) >= 10 and date_str[4] == "-":
        dayfirst = False

    try:
        dt = date_parser.parse(date_str, dayfirst=dayfirst)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_date(value: Optional[date]) -> str:
    """Format a date the way statements and reports print it (DD/MM/YYYY)."""
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")
