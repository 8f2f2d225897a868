"""SQLAlchemy sync history store implementation."""

from typing import Optional
from datetime import date, datetime, UTC
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from freee_beancount.database.base import SyncHistoryStore
from freee_beancount.database.models import (
    DocumentAttachment,
    SyncHistory,
    SyncMetadata,
    create_session_factory,
)
from freee_beancount.database.mappers import (
    document_attachment_to_domain,
    sync_record_to_domain,
    sync_record_to_orm,
)
from freee_beancount.domain.entities import (
    DocumentAttachment as DomainDocumentAttachment,
    SyncRecord,
    SyncStats,
    SyncType,
)
from freee_beancount.domain.errors import (
    DuplicateSyncError,
    HistoryWriteError,
    duplicate_sync,
    history_write_failed,
)

SCHEMA_VERSION = "1.0.0"


class SQLAlchemySyncHistory(SyncHistoryStore):
    """SQLAlchemy-based implementation of SyncHistoryStore."""

    def __init__(self, database_url: str):
        """Initialize the store and bootstrap its schema.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to/sync.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None
        self.initialize_schema()

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Write schema bookkeeping the first time the database is opened."""
        # Tables are created by create_session_factory
        if self.get_metadata("schema_version") is None:
            self.set_metadata("schema_version", SCHEMA_VERSION)
            self.set_metadata("created_at", datetime.now(UTC).isoformat())

    # Sync history operations
    def get_synced_ids(self, sync_type: SyncType) -> set[int]:
        session = self._get_session()
        rows = session.query(SyncHistory.freee_id).filter(
            SyncHistory.sync_type == SyncType(sync_type).value
        )
        return {freee_id for (freee_id,) in rows}

    def record_sync(self, record: SyncRecord) -> int:
        """Record a synced transaction. Returns record ID."""
        session = self._get_session()
        orm_record = sync_record_to_orm(record)
        session.add(orm_record)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise DuplicateSyncError(duplicate_sync(SyncType(record.sync_type).value, record.freee_id))
        except SQLAlchemyError as e:
            session.rollback()
            raise HistoryWriteError(
                history_write_failed(SyncType(record.sync_type).value, record.freee_id, e)
            ) from e
        return orm_record.id

    def is_synced(self, sync_type: SyncType, freee_id: int) -> bool:
        return self._find(sync_type, freee_id) is not None

    def get_sync_record(self, sync_type: SyncType, freee_id: int) -> Optional[SyncRecord]:
        orm_record = self._find(sync_type, freee_id)
        if orm_record is None:
            return None
        return sync_record_to_domain(orm_record)

    def list_sync_records(
        self,
        sync_type: Optional[SyncType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[SyncRecord]:
        """List sync records ordered by issue date."""
        session = self._get_session()
        query = session.query(SyncHistory)
        if sync_type is not None:
            query = query.filter(SyncHistory.sync_type == SyncType(sync_type).value)
        if start_date is not None:
            query = query.filter(SyncHistory.issue_date >= start_date)
        if end_date is not None:
            query = query.filter(SyncHistory.issue_date <= end_date)
        rows = query.order_by(SyncHistory.issue_date, SyncHistory.id).all()
        return [sync_record_to_domain(row) for row in rows]

    def delete_sync_record(self, sync_type: SyncType, freee_id: int) -> bool:
        session = self._get_session()
        orm_record = self._find(sync_type, freee_id)
        if orm_record is None:
            return False
        session.delete(orm_record)
        session.commit()
        return True

    def _find(self, sync_type: SyncType, freee_id: int) -> Optional[SyncHistory]:
        session = self._get_session()
        return (
            session.query(SyncHistory)
            .filter(
                SyncHistory.sync_type == SyncType(sync_type).value,
                SyncHistory.freee_id == freee_id,
            )
            .first()
        )

    # Document attachment operations
    def record_document_attachment(
        self,
        transaction_date: date,
        document_path: str,
        ref_number: Optional[str] = None,
        deal_id: Optional[int] = None,
    ) -> int:
        """Record a filed document. Returns attachment ID."""
        session = self._get_session()
        attachment = DocumentAttachment(
            transaction_date=transaction_date,
            document_path=document_path,
            ref_number=ref_number,
            deal_id=deal_id,
        )
        session.add(attachment)
        session.commit()
        return attachment.id

    def get_document_attachments(self, deal_id: int) -> list[DomainDocumentAttachment]:
        session = self._get_session()
        rows = (
            session.query(DocumentAttachment)
            .filter(DocumentAttachment.deal_id == deal_id)
            .order_by(DocumentAttachment.attached_at, DocumentAttachment.id)
            .all()
        )
        return [document_attachment_to_domain(row) for row in rows]

    def is_document_attached(self, document_path: str) -> bool:
        session = self._get_session()
        return (
            session.query(DocumentAttachment)
            .filter(DocumentAttachment.document_path == document_path)
            .first()
            is not None
        )

    # Metadata and statistics
    def get_metadata(self, key: str) -> Optional[str]:
        session = self._get_session()
        row = session.query(SyncMetadata).filter(SyncMetadata.key == key).first()
        return row.value if row is not None else None

    def set_metadata(self, key: str, value: str) -> None:
        session = self._get_session()
        row = session.query(SyncMetadata).filter(SyncMetadata.key == key).first()
        if row is None:
            session.add(SyncMetadata(key=key, value=value))
        else:
            row.value = value
            row.updated_at = datetime.now(UTC)
        session.commit()

    def get_stats(self) -> SyncStats:
        """Return totals and the most recent sync time."""
        session = self._get_session()
        counts = dict(
            session.query(SyncHistory.sync_type, func.count(SyncHistory.id))
            .group_by(SyncHistory.sync_type)
            .all()
        )
        return SyncStats(
            total_deals=counts.get(SyncType.DEAL.value, 0),
            total_journals=counts.get(SyncType.JOURNAL.value, 0),
            total_documents=session.query(func.count(DocumentAttachment.id)).scalar() or 0,
            last_sync=session.query(func.max(SyncHistory.synced_at)).scalar(),
        )
