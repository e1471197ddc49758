"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or row does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a duplicate account name."""


class WorkflowError(DomainError):
    """Operation not available at the session's current stage."""


class ExternalServiceError(DomainError):
    """An extraction or categorization collaborator failed.

    The session is left exactly as it was before the call.
    """


def session_not_found(session_id: int) -> str:
    """Return message for missing filing session."""
    return f"Filing session {session_id} not found"


def transaction_index_out_of_range(index: int, count: int) -> str:
    """Return message for a ledger row index outside the ledger."""
    return f"Transaction {index} not found (ledger has {count} row{'s' if count != 1 else ''})"


def category_not_in_chart(path: str) -> str:
    """Return message for a category path that is neither canonical nor custom."""
    return f"Category '{path}' not found in the chart of accounts"


def opening_category_not_found(category: str) -> str:
    """Return message for an unknown opening-balance section."""
    return f"Opening balance category '{category}' not found (expected Assets, Liabilities or Equity)"


def opening_account_not_found(account: str) -> str:
    """Return message for an unknown opening-balance account."""
    return f"Opening balance account '{account}' not found"


def trial_balance_not_built() -> str:
    """Return message when the trial balance is used before it is built."""
    return "Trial balance has not been built yet. Complete the opening balances stage first."


def stage_required(action: str, stage_label: str) -> str:
    """Return message when an action is attempted outside its stage."""
    return f"Cannot {action}: the session must be at the '{stage_label}' stage"


def service_failed(service: str, error: Exception) -> str:
    """Return message for a failed external collaborator call."""
    return f"{service} failed: {error}"


def stage_not_reached(action: str, stage_label: str) -> str:
    """Return message when an action needs a later stage."""
    return f"Cannot {action} before the '{stage_label}' stage"


def duplicate_custom_category(path: str) -> str:
    """Return message for a custom category that already exists."""
    return f"Category '{path}' already exists"


def working_note_locked(account: str) -> str:
    """Return message for editing an account computed from its working note."""
    return f"Account '{account}' is computed from its working note. Edit the note with 'tb note' instead."


def totals_not_editable() -> str:
    """Return message for edits aimed at the computed Totals row."""
    return "Totals is computed from the other accounts and cannot have a working note"
