"""SQLAlchemy models backing the emulator store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def utcnow() -> datetime:
    # SQLite drops tzinfo, so timestamps compared in Python are kept naive UTC
    return datetime.now(UTC).replace(tzinfo=None)


class Deal(Base):
    """Booked income or expense transaction."""

    __tablename__ = "deals"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    type = Column(String, nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    due_amount = Column(Integer, nullable=True)
    ref_number = Column(String, nullable=True)
    partner_id = Column(Integer, nullable=True)
    partner_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("idx_deals_company_issue_date", "company_id", "issue_date"),)

    # Relationships
    details = relationship(
        "DealDetail", back_populates="deal", cascade="all, delete-orphan", order_by="DealDetail.id"
    )
    payments = relationship(
        "DealPayment", back_populates="deal", cascade="all, delete-orphan", order_by="DealPayment.id"
    )


class DealDetail(Base):
    """Line item of a deal."""

    __tablename__ = "deal_details"

    id = Column(Integer, primary_key=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False)
    account_item_id = Column(Integer, nullable=False)
    account_item_name = Column(String, nullable=False)
    tax_code = Column(Integer, nullable=False, default=0)
    amount = Column(Integer, nullable=False)
    vat = Column(Integer, nullable=False, default=0)
    description = Column(String, nullable=True)
    item_id = Column(Integer, nullable=True)
    section_id = Column(Integer, nullable=True)

    # Relationships
    deal = relationship("Deal", back_populates="details")


class DealPayment(Base):
    """Payment recorded against a deal."""

    __tablename__ = "deal_payments"

    id = Column(Integer, primary_key=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    from_walletable_type = Column(String, nullable=False)
    from_walletable_id = Column(Integer, nullable=False)

    # Relationships
    deal = relationship("Deal", back_populates="payments")


class Journal(Base):
    """Manual journal entry."""

    __tablename__ = "journals"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    issue_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("idx_journals_company_issue_date", "company_id", "issue_date"),)

    # Relationships
    details = relationship(
        "JournalDetail",
        back_populates="journal",
        cascade="all, delete-orphan",
        order_by="JournalDetail.id",
    )


class JournalDetail(Base):
    """Debit or credit line of a journal."""

    __tablename__ = "journal_details"

    id = Column(Integer, primary_key=True)
    journal_id = Column(Integer, ForeignKey("journals.id"), nullable=False)
    entry_type = Column(String, nullable=False)
    account_item_id = Column(Integer, nullable=False)
    account_item_name = Column(String, nullable=False)
    tax_code = Column(Integer, nullable=False, default=0)
    partner_id = Column(Integer, nullable=True)
    amount = Column(Integer, nullable=False)
    vat = Column(Integer, nullable=False, default=0)
    description = Column(String, nullable=True)

    # Relationships
    journal = relationship("Journal", back_populates="details")


class WalletTxn(Base):
    """Bank or card feed line. The only row the emulator mutates in place."""

    __tablename__ = "wallet_txns"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    balance = Column(Integer, nullable=True)
    entry_side = Column(String, nullable=False)
    walletable_type = Column(String, nullable=False)
    walletable_id = Column(Integer, nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="unbooked")
    deal_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("idx_wallet_txns_match", "company_id", "status", "date"),)


class Receipt(Base):
    """Uploaded receipt file."""

    __tablename__ = "receipts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    issue_date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="unconfirmed")
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class AccessToken(Base):
    """Issued OAuth token."""

    __tablename__ = "access_tokens"

    token = Column(String, primary_key=True)
    kind = Column(String, nullable=False, default="access")
    company_id = Column(Integer, nullable=False)
    expires_at = Column(DateTime, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(
            database_url, echo=False, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
