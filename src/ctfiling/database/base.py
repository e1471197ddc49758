"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ctfiling.domain.session import FilingSession


class Database(ABC):
    """Abstract database interface for ctfiling."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def create_session(self, session: FilingSession) -> int:
        """Store a new filing session. Returns session ID and sets session.id."""
        pass

    @abstractmethod
    def get_session(self, session_id: int) -> Optional[FilingSession]:
        """Get filing session by ID."""
        pass

    @abstractmethod
    def list_sessions(self) -> list[FilingSession]:
        """List all filing sessions, oldest first."""
        pass

    @abstractmethod
    def save_session(self, session: FilingSession) -> None:
        """Persist the full state of an existing filing session."""
        pass

    @abstractmethod
    def delete_session(self, session_id: int) -> None:
        """Delete a filing session."""
        pass
