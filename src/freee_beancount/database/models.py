"""SQLAlchemy models for the sync history database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class SyncHistory(Base):
    """A remote transaction already written to a ledger file."""

    __tablename__ = "sync_history"

    id = Column(Integer, primary_key=True)
    sync_type = Column(String, nullable=False)
    freee_id = Column(Integer, nullable=False)
    issue_date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    beancount_file = Column(String, nullable=False)
    synced_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("sync_type", "freee_id", name="uq_sync_type_freee_id"),
        Index("idx_sync_history_issue_date", "issue_date"),
        Index("idx_sync_history_freee_id", "freee_id"),
        Index("idx_sync_history_type_id", "sync_type", "freee_id"),
    )


class DocumentAttachment(Base):
    """A receipt or invoice filed against a transaction."""

    __tablename__ = "document_attachments"

    id = Column(Integer, primary_key=True)
    transaction_date = Column(Date, nullable=False)
    ref_number = Column(String, nullable=True)
    deal_id = Column(Integer, nullable=True)
    document_path = Column(String, nullable=False)
    attached_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_document_attachments_date", "transaction_date"),
        Index("idx_document_attachments_deal_id", "deal_id"),
    )


class SyncMetadata(Base):
    """Global key/value bookkeeping, such as the schema version."""

    __tablename__ = "sync_metadata"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
