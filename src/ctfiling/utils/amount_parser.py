"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

ZERO = Decimal("0")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "AED 123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥]|AED|USD|EUR|GBP", "", amount_str, flags=re.IGNORECASE)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    return -amount if is_negative else amount


def to_amount(value: object) -> Decimal:
    """Coerce a cell or extracted value to a Decimal, treating anything malformed as zero.

    Args:
        value: A number, numeric string, Decimal or None

    Returns:
        Decimal amount (0 when the value cannot be parsed)
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # Go through str() so 0.1 stays 0.1
        return to_amount(str(value))
    try:
        return parse_amount(str(value))
    except ValueError:
        return ZERO
