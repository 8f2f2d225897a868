"""Domain model entities for freee_beancount.

These are pure data classes representing business concepts, independent of
the remote API payloads and the database schema. Amounts are integers in the
currency's minor unit (yen).
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional


class DealType(str, Enum):
    """Direction of a deal."""

    INCOME = "income"
    EXPENSE = "expense"


class EntryType(str, Enum):
    """Side of a journal line."""

    DEBIT = "debit"
    CREDIT = "credit"


class WalletableType(str, Enum):
    """Kind of funding source a payment is drawn from."""

    BANK_ACCOUNT = "bank_account"
    CREDIT_CARD = "credit_card"
    WALLET = "wallet"


class SyncType(str, Enum):
    """Kind of remote transaction recorded in the sync history."""

    DEAL = "deal"
    JOURNAL = "journal"


@dataclass(frozen=True)
class Detail:
    """One line item of a deal."""

    account_item_name: str
    amount: int
    tax_code: int = 0
    vat: int = 0
    description: Optional[str] = None
    id: Optional[int] = None
    account_item_id: Optional[int] = None


@dataclass(frozen=True)
class Payment:
    """Links a deal to the wallet it was paid from or into."""

    date: date
    amount: int
    from_walletable_type: str
    from_walletable_id: int
    id: Optional[int] = None


@dataclass(frozen=True)
class Deal:
    """A booked income or expense transaction."""

    id: int
    company_id: int
    issue_date: date
    type: DealType
    details: tuple[Detail, ...]
    amount: int
    payments: tuple[Payment, ...] = ()
    due_date: Optional[date] = None
    due_amount: Optional[int] = None
    ref_number: Optional[str] = None
    partner_id: Optional[int] = None
    partner_code: Optional[str] = None

    def year_month(self) -> str:
        """Return the ``YYYY-MM`` month this deal is filed under."""
        return f"{self.issue_date.year:04d}-{self.issue_date.month:02d}"


@dataclass(frozen=True)
class JournalDetail:
    """One debit or credit line of a manual journal."""

    entry_type: EntryType
    account_item_name: str
    amount: int
    tax_code: int = 0
    vat: int = 0
    description: Optional[str] = None
    id: Optional[int] = None
    account_item_id: Optional[int] = None


@dataclass(frozen=True)
class Journal:
    """A manual double-entry journal."""

    id: int
    company_id: int
    issue_date: date
    details: tuple[JournalDetail, ...]

    def year_month(self) -> str:
        """Return the ``YYYY-MM`` month this journal is filed under."""
        return f"{self.issue_date.year:04d}-{self.issue_date.month:02d}"

    @property
    def debit_total(self) -> int:
        return sum(d.amount for d in self.details if d.entry_type == EntryType.DEBIT)


@dataclass(frozen=True)
class Posting:
    """A single ledger posting."""

    account: str
    amount: int
    currency: str
    comment: Optional[str] = None


@dataclass(frozen=True)
class LedgerTransaction:
    """A ledger transaction block ready to be formatted."""

    date: date
    narration: str
    postings: tuple[Posting, ...]
    payee: Optional[str] = None
    tags: tuple[str, ...] = ()
    flag: str = "*"

    def total(self) -> int:
        return sum(p.amount for p in self.postings)


@dataclass(frozen=True)
class ConversionResult:
    """A converted transaction plus the diagnostics raised while converting it."""

    transaction: LedgerTransaction
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SyncRecord:
    """A remote transaction that has been written to the ledger."""

    sync_type: SyncType
    freee_id: int
    issue_date: date
    amount: int
    beancount_file: str
    id: Optional[int] = None
    synced_at: Optional[datetime] = None


@dataclass(frozen=True)
class DocumentAttachment:
    """A receipt or invoice filed against a transaction."""

    transaction_date: date
    document_path: str
    ref_number: Optional[str] = None
    deal_id: Optional[int] = None
    id: Optional[int] = None
    attached_at: Optional[datetime] = None


@dataclass(frozen=True)
class SyncStats:
    """Totals reported by the sync history store."""

    total_deals: int
    total_journals: int
    total_documents: int
    last_sync: Optional[datetime]
