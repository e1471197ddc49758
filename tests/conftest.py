"""Shared pytest fixtures for ctfiling tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ctfiling.database.factories import create_sqlite_database
from ctfiling.domain.entities import BankStatementSummary, Transaction, TrialBalanceEntry
from ctfiling.domain.session import FilingSession
from ctfiling.domain.transaction import TransactionLedger
from ctfiling.domain.trial_balance import TrialBalance

SHARE_CAPITAL = "Share Capital / Owner’s Equity"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def reload_session(temp_db):
    """Read a session back through a fresh connection (after CLI commands wrote it)."""

    def _reload(session_id: int) -> FilingSession:
        db = create_sqlite_database(database_path=temp_db.database_path)
        try:
            return db.get_session(session_id)
        finally:
            db.disconnect()

    return _reload


@pytest.fixture
def sample_transactions():
    """Statement rows: opening 10,000, closing 11,750."""
    return [
        Transaction(
            date=date(2024, 1, 3),
            description="POS ENOC FUEL STATION",
            debit=Decimal("200"),
            category="Fuel",
            source_file="jan.csv",
        ),
        Transaction(
            date=date(2024, 1, 10),
            description="Customer payment INV-001",
            credit=Decimal("5000"),
            category="Sales Revenue",
            source_file="jan.csv",
        ),
        Transaction(
            date=date(2024, 1, 15),
            description="Monthly bank charges",
            debit=Decimal("50"),
            category="Expenses | OtherExpense | Bank Charges",
            source_file="jan.csv",
        ),
        Transaction(
            date=date(2024, 1, 28),
            description="Office rent January",
            debit=Decimal("3000"),
            category="",
            source_file="jan.csv",
        ),
    ]


@pytest.fixture
def statement_summary():
    return BankStatementSummary(opening_balance=Decimal("10000"), closing_balance=Decimal("11750"))


@pytest.fixture
def sample_ledger(sample_transactions):
    """Create a ledger with resolved categories."""
    ledger = TransactionLedger()
    ledger.ingest(sample_transactions)
    return ledger


@pytest.fixture
def sample_session(sample_transactions, statement_summary):
    """Create a session at the review stage with one imported statement."""
    session = FilingSession(name="FY2024", company_name="Acme Trading LLC")
    session.import_statement("jan.csv", sample_transactions, statement_summary)
    return session


@pytest.fixture
def balanced_trial_balance():
    """A balanced trial balance with a net profit of 50,000."""
    return TrialBalance(
        [
            TrialBalanceEntry("Bank Accounts", debit=Decimal("100000")),
            TrialBalanceEntry(SHARE_CAPITAL, credit=Decimal("50000")),
            TrialBalanceEntry("Sales Revenue", credit=Decimal("500000")),
            TrialBalanceEntry("Direct Cost (COGS)", debit=Decimal("300000")),
            TrialBalanceEntry("Salaries & Wages", debit=Decimal("100000")),
            TrialBalanceEntry("Bank Charges", debit=Decimal("50000")),
        ]
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def statement_csv(tmp_path):
    """Write a bank statement CSV whose running balance starts from 10,000."""
    path = tmp_path / "jan.csv"
    path.write_text(
        "Date,Description,Debit,Credit,Balance,Category\n"
        "03/01/2024,POS ENOC FUEL STATION,200.00,,9800.00,Fuel\n"
        "10/01/2024,Customer payment INV-001,,5000.00,14800.00,Sales Revenue\n"
        "15/01/2024,Monthly bank charges,50.00,,14750.00,Bank Charges\n"
        "28/01/2024,Office rent January,3000.00,,11750.00,\n",
        encoding="utf-8",
    )
    return path
