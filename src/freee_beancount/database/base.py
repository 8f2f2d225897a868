"""Abstract sync history store interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from freee_beancount.domain.entities import (
    DocumentAttachment,
    SyncRecord,
    SyncStats,
    SyncType,
)


class SyncHistoryStore(ABC):
    """Durable record of which remote transactions have been synced."""

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
        """Create tables and write the initial metadata."""
        pass

    # Sync history operations
    @abstractmethod
    def get_synced_ids(self, sync_type: SyncType) -> set[int]:
        """Return every remote ID already synced for a type."""
        pass

    @abstractmethod
    def record_sync(self, record: SyncRecord) -> int:
        """Record a synced transaction. Returns record ID.

        Raises:
            DuplicateSyncError: If (sync_type, freee_id) is already recorded
            HistoryWriteError: If the database rejects the write for any other reason
        """
        pass

    @abstractmethod
    def is_synced(self, sync_type: SyncType, freee_id: int) -> bool:
        """Check if a remote transaction has been synced."""
        pass

    @abstractmethod
    def get_sync_record(self, sync_type: SyncType, freee_id: int) -> Optional[SyncRecord]:
        """Get the sync record for a remote transaction."""
        pass

    @abstractmethod
    def list_sync_records(
        self,
        sync_type: Optional[SyncType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[SyncRecord]:
        """List sync records ordered by issue date."""
        pass

    @abstractmethod
    def delete_sync_record(self, sync_type: SyncType, freee_id: int) -> bool:
        """Forget a synced transaction so it is picked up again. Returns True if deleted."""
        pass

    # Document attachment operations
    @abstractmethod
    def record_document_attachment(
        self,
        transaction_date: date,
        document_path: str,
        ref_number: Optional[str] = None,
        deal_id: Optional[int] = None,
    ) -> int:
        """Record a filed document. Returns attachment ID."""
        pass

    @abstractmethod
    def get_document_attachments(self, deal_id: int) -> list[DocumentAttachment]:
        """List documents filed against a deal."""
        pass

    @abstractmethod
    def is_document_attached(self, document_path: str) -> bool:
        """Check if a document path has already been filed."""
        pass

    # Metadata and statistics
    @abstractmethod
    def get_metadata(self, key: str) -> Optional[str]:
        """Get a metadata value."""
        pass

    @abstractmethod
    def set_metadata(self, key: str, value: str) -> None:
        """Insert or replace a metadata value."""
        pass

    @abstractmethod
    def get_stats(self) -> SyncStats:
        """Return totals and the most recent sync time."""
        pass
