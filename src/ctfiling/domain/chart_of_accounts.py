"""Fixed chart of accounts.

Main categories map either to a flat list of account names or to
sub-groups of account names. Iteration order matters: category resolution
and opening balance seeding walk the chart in exactly this order.
"""

from typing import Iterator, NamedTuple, Optional, Union

ChartSection = Union[list[str], dict[str, list[str]]]

CHART_OF_ACCOUNTS: dict[str, ChartSection] = {
    "Assets": {
        "CurrentAssets": [
            "Cash on Hand",
            "Bank Accounts",
            "Accounts Receivable",
            "Due from related Parties",
            "Advances to Suppliers",
            "Prepaid Expenses",
            "Deposits",
            "Inventory – Goods",
            "Work-in-Progress – Services",
            "VAT Recoverable (Input VAT)",
        ],
        "NonCurrentAssets": [
            "Furniture & Equipment",
            "Vehicles",
            "Intangibles (Software, Patents)",
            "Loans to related parties",
        ],
        "ContraAccounts": ["Accumulated Depreciation"],
    },
    "Liabilities": {
        "CurrentLiabilities": [
            "Accounts Payable",
            "Due to Related Parties",
            "Accrued Expenses",
            "Advances from Customers",
            "Short-Term Loans",
            "VAT Payable (Output VAT)",
            "Corporate Tax Payable",
        ],
        "Long-TermLiabilities": [
            "Long-Term Loans",
            "Loans from Related Parties",
            "Employee End-of-Service Benefits Provision",
        ],
    },
    "Equity": [
        "Share Capital / Owner’s Equity",
        "Retained Earnings",
        "Current Year Profit/Loss",
        "Dividends / Owner’s Drawings",
        "Owner's Current Account",
        "Investments in Subsidiaries / Associates",
    ],
    "Income": {
        "OperatingIncome": ["Sales Revenue", "Sales to related Parties"],
        "OtherIncome": [
            "Other Operating Income",
            "Interest Income",
            "Miscellaneous Income",
            "Interest from Related Parties",
        ],
    },
    "Expenses": {
        "DirectCosts": ["Direct Cost (COGS)", "Purchases from Related Parties"],
        "OtherExpense": [
            "Salaries & Wages",
            "Staff Benefits",
            "Training & Development",
            "Rent Expense",
            "Utility - Electricity & Water",
            "Utility - Telephone & Internet",
            "Office Supplies & Stationery",
            "Repairs & Maintenance",
            "Insurance Expense",
            "Marketing & Advertising",
            "Travel & Entertainment",
            "Professional Fees",
            "Legal Fees",
            "IT & Software Subscriptions",
            "Fuel Expenses",
            "Transportation & Logistics",
            "Interest Expense",
            "Interest to Related Parties",
            "Bank Charges",
            "VAT Expense (non-recoverable)",
            "Corporate Tax Expense",
            "Government Fees & Licenses",
            "Depreciation",
            "Amortization – Intangibles",
            "Bad Debt Expense",
            "Miscellaneous Expense",
        ],
    },
}

# Sections seeded into the opening balance step
BALANCE_SHEET_SECTIONS = ("Assets", "Liabilities", "Equity")

PATH_SEPARATOR = " | "


class ChartLeaf(NamedTuple):
    """One account name together with its position in the chart."""

    main: str
    sub_group: Optional[str]
    name: str

    @property
    def path(self) -> str:
        if self.sub_group is None:
            return f"{self.main}{PATH_SEPARATOR}{self.name}"
        return f"{self.main}{PATH_SEPARATOR}{self.sub_group}{PATH_SEPARATOR}{self.name}"


def iter_leaves(
    chart: Optional[dict[str, ChartSection]] = None, main: Optional[str] = None
) -> Iterator[ChartLeaf]:
    """Walk the chart in order, yielding every account name.

    Args:
        chart: Chart to walk (defaults to CHART_OF_ACCOUNTS)
        main: Optional main category to restrict the walk to
    """
    chart = CHART_OF_ACCOUNTS if chart is None else chart
    for main_name, section in chart.items():
        if main is not None and main_name != main:
            continue
        if isinstance(section, list):
            for name in section:
                yield ChartLeaf(main_name, None, name)
        else:
            for sub_group, names in section.items():
                for name in names:
                    yield ChartLeaf(main_name, sub_group, name)
