"""SQLAlchemy models for ctfiling database."""

from datetime import datetime, UTC

from sqlalchemy import JSON, Column, DateTime, Integer, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


class FilingSessionRecord(Base):
    """One corporate tax filing; the session aggregate is stored as JSON."""

    __tablename__ = "filing_sessions"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    company_name = Column(String, nullable=True)
    stage = Column(Integer, nullable=False, default=1)
    state = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
