"""VAT return documents of the filing period.

Each uploaded VAT 201 return yields the sales total (return field 8), the
expenses total (return field 11) and the return period.
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from ctfiling.domain.entities import ZERO, VatFileResult
from ctfiling.utils.amount_parser import to_amount

VAT_FLOW_QUESTIONS = (
    "VAT 201 Certificates Available?",
    "Sales/Purchase Ledgers Available?",
)

SALES_KEYS = ("salesTotal", "salesField8", "sales_total")
EXPENSES_KEYS = ("expensesTotal", "expensesField11", "expenses_total")
PERIOD_FROM_KEYS = ("periodFrom", "period_from")
PERIOD_TO_KEYS = ("periodTo", "period_to")


def _first(data: Mapping[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


def vat_result_from_extraction(file_name: str, data: Mapping[str, Any]) -> VatFileResult:
    """Build a VAT file result from an extraction service response.

    Missing or malformed totals are zero; missing periods are None.
    """
    period_from = _first(data, PERIOD_FROM_KEYS)
    period_to = _first(data, PERIOD_TO_KEYS)
    return VatFileResult(
        file_name=file_name,
        sales_total=to_amount(_first(data, SALES_KEYS)),
        expenses_total=to_amount(_first(data, EXPENSES_KEYS)),
        period_from=str(period_from) if period_from is not None else None,
        period_to=str(period_to) if period_to is not None else None,
    )


def vat_totals(results: Iterable[VatFileResult]) -> tuple[Decimal, Decimal]:
    """Return (total sales, total expenses) across VAT file results."""
    sales = ZERO
    expenses = ZERO
    for result in results:
        sales += result.sales_total
        expenses += result.expenses_total
    return sales, expenses
