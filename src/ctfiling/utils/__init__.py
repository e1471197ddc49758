"""Utility functions for ctfiling."""

from ctfiling.utils.date_parser import parse_date, format_date
from ctfiling.utils.amount_parser import parse_amount, to_amount

__all__ = ["parse_date", "format_date", "parse_amount", "to_amount"]
