"""Mapper functions to convert between domain models and SQLAlchemy models."""

from freee_beancount.domain import entities as domain
from freee_beancount.database.models import (
    SyncHistory as ORMSyncHistory,
    DocumentAttachment as ORMDocumentAttachment,
)


def sync_record_to_domain(orm_record: ORMSyncHistory) -> domain.SyncRecord:
    """Convert SQLAlchemy SyncHistory row to domain SyncRecord entity."""
    return domain.SyncRecord(
        id=orm_record.id,
        sync_type=domain.SyncType(orm_record.sync_type),
        freee_id=orm_record.freee_id,
        issue_date=orm_record.issue_date,
        amount=orm_record.amount,
        beancount_file=orm_record.beancount_file,
        synced_at=orm_record.synced_at,
    )


def sync_record_to_orm(record: domain.SyncRecord) -> ORMSyncHistory:
    """Build a SyncHistory row from a domain SyncRecord."""
    orm_record = ORMSyncHistory(
        sync_type=domain.SyncType(record.sync_type).value,
        freee_id=record.freee_id,
        issue_date=record.issue_date,
        amount=record.amount,
        beancount_file=record.beancount_file,
    )
    if record.synced_at is not None:
        orm_record.synced_at = record.synced_at
    return orm_record


def document_attachment_to_domain(orm_doc: ORMDocumentAttachment) -> domain.DocumentAttachment:
    """Convert SQLAlchemy DocumentAttachment row to domain entity."""
    return domain.DocumentAttachment(
        id=orm_doc.id,
        transaction_date=orm_doc.transaction_date,
        ref_number=orm_doc.ref_number,
        deal_id=orm_doc.deal_id,
        document_path=orm_doc.document_path,
        attached_at=orm_doc.attached_at,
    )
