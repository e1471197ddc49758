"""Tests for database mappers."""

from decimal import Decimal

from ctfiling.database.mappers import session_to_domain, session_to_state
from ctfiling.database.models import FilingSessionRecord
from ctfiling.domain.entities import BreakdownEntry, Transaction
from ctfiling.domain.session import FilingSession
from ctfiling.domain.workflow import WorkflowStage


def _record(session: FilingSession, record_id: int = 7) -> FilingSessionRecord:
    return FilingSessionRecord(
        id=record_id,
        name=session.name,
        company_name=session.company_name,
        stage=int(session.stage),
        state=session_to_state(session),
    )


class TestSessionMapper:
    """Tests for the filing session mapper."""

    def test_state_stores_money_as_strings(self, sample_session):
        """Test that amounts are serialized as decimal strings."""
        state = session_to_state(sample_session)

        first = state["transactions"][0]
        assert first["debit"] == "200"
        assert first["date"] == "2024-01-03"
        assert state["bank_summaries"]["jan.csv"] == {
            "opening_balance": "10000",
            "closing_balance": "11750",
        }
        assert state["trial_balance"] is None

    def test_round_trip_ledger_and_summaries(self, sample_session):
        """Test converting a session to a row and back."""
        sample_session.ledger.select([1, 2])

        loaded = session_to_domain(_record(sample_session))

        assert loaded.id == 7
        assert loaded.ledger.transactions == sample_session.ledger.transactions
        assert loaded.ledger.selection == {1, 2}
        assert loaded.bank_summaries == sample_session.bank_summaries
        assert loaded.mutation_log == sample_session.mutation_log

    def test_round_trip_trial_balance_and_questionnaire(self, sample_session):
        """Test that adjusted trial balance and answers survive a round trip."""
        sample_session.share_capital = Decimal("10000")
        sample_session.build_trial_balance()
        sample_session.stage = WorkflowStage.ADJUST_TRIAL_BALANCE
        sample_session.save_working_note(
            "Fuel Expenses", [BreakdownEntry("ENOC", debit=Decimal("200"))]
        )
        sample_session.stage = WorkflowStage.QUESTIONNAIRE
        sample_session.answer_question(6, "Yes")
        sample_session.answer_question(11, "3")
        sample_session.set_revenue(current="5000.50")

        loaded = session_to_domain(_record(sample_session))

        assert loaded.stage == WorkflowStage.QUESTIONNAIRE
        assert loaded.trial_balance.entries() == sample_session.trial_balance.entries()
        assert loaded.trial_balance.breakdown("Fuel Expenses") == [
            BreakdownEntry("ENOC", debit=Decimal("200"))
        ]
        assert loaded.questionnaire.answers == {6: "Yes", 11: "3"}
        assert loaded.questionnaire.current_revenue == Decimal("5000.50")
        assert loaded.relief_claimed

    def test_round_trip_opening_balances_and_vat(self, sample_session):
        """Test opening balances, VAT state and custom categories."""
        sample_session.stage = WorkflowStage.OPENING_BALANCES
        sample_session.add_opening_account("Assets", "Petty Cash")
        sample_session.set_opening_balance("Petty Cash", "debit", "75")
        sample_session.vat_answers = [False, False]
        sample_session.vat_route = False
        sample_session.additional_details = {"share_capital": "10000"}
        sample_session.custom_categories = ["Expenses | Pantry Supplies"]

        loaded = session_to_domain(_record(sample_session))

        section, account = loaded.opening_balances.find_account("Petty Cash")
        assert section.category == "Assets"
        assert account.debit == Decimal("75")
        assert account.is_new
        assert loaded.vat_answers == [False, False]
        assert loaded.vat_route is False
        assert loaded.additional_details == {"share_capital": "10000"}
        assert loaded.custom_categories == ["Expenses | Pantry Supplies"]

    def test_empty_state_gives_defaults(self):
        """Test that a row with no state maps to a fresh session."""
        record = FilingSessionRecord(id=1, name="FY2024", company_name=None, stage=1, state=None)

        session = session_to_domain(record)

        assert len(session.ledger) == 0
        assert session.trial_balance is None
        assert session.vat_route is None
        assert len(session.opening_balances.categories) == 3

    def test_transaction_without_date(self):
        """Test that undated transactions are kept."""
        session = FilingSession(name="FY2024")
        session.ledger.extend([Transaction(date=None, description="Opening", credit=Decimal("1"))])

        loaded = session_to_domain(_record(session))

        assert loaded.ledger[0].date is None
        assert loaded.ledger[0].credit == Decimal("1")
