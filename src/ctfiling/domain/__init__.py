"""Domain layer for ctfiling application."""

from ctfiling.domain.category import CategoryResolver, resolve_category_path
from ctfiling.domain.derivation import derive
from ctfiling.domain.opening_balance import OpeningBalanceSet
from ctfiling.domain.session import FilingSession
from ctfiling.domain.transaction import TransactionLedger
from ctfiling.domain.trial_balance import TrialBalance
from ctfiling.domain.workflow import WorkflowService, WorkflowStage

__all__ = [
    "CategoryResolver",
    "resolve_category_path",
    "derive",
    "OpeningBalanceSet",
    "FilingSession",
    "TransactionLedger",
    "TrialBalance",
    "WorkflowService",
    "WorkflowStage",
]
