"""Tests for VAT return extraction results."""

from decimal import Decimal

from ctfiling.domain.entities import VatFileResult
from ctfiling.domain.vat import vat_result_from_extraction, vat_totals


def test_result_from_camel_case_keys():
    result = vat_result_from_extraction(
        "q1.pdf",
        {"salesField8": "120,000.50", "expensesField11": 40000, "periodFrom": "01/01/2024", "periodTo": "31/03/2024"},
    )

    assert result.sales_total == Decimal("120000.50")
    assert result.expenses_total == Decimal("40000")
    assert result.period_from == "01/01/2024"
    assert result.period_to == "31/03/2024"


def test_result_from_snake_case_keys():
    result = vat_result_from_extraction("q2.pdf", {"sales_total": "10", "expenses_total": "5"})

    assert result.sales_total == Decimal("10")
    assert result.expenses_total == Decimal("5")


def test_missing_or_malformed_values():
    result = vat_result_from_extraction("q3.pdf", {"salesTotal": "", "expensesTotal": "n/a"})

    assert result.sales_total == Decimal("0")
    assert result.expenses_total == Decimal("0")
    assert result.period_from is None


def test_vat_totals():
    results = [
        VatFileResult("q1.pdf", Decimal("100"), Decimal("40")),
        VatFileResult("q2.pdf", Decimal("50"), Decimal("10")),
    ]
    assert vat_totals(results) == (Decimal("150"), Decimal("50"))
    assert vat_totals([]) == (Decimal("0"), Decimal("0"))
