"""Construction of the collaborators a command needs from settings."""

from freee_beancount.client.freee_client import FreeeClient
from freee_beancount.client.retry import RetryConfig
from freee_beancount.config import SyncSettings
from freee_beancount.database.base import SyncHistoryStore
from freee_beancount.database.factories import create_sqlite_history
from freee_beancount.database.sqlalchemy_db import SQLAlchemySyncHistory
from freee_beancount.domain.converter import BeancountConverter
from freee_beancount.domain.mapper import AccountMapper
from freee_beancount.ledger.paths import PathResolver
from freee_beancount.ledger.repository import FileSystemLedgerRepository


def build_client(settings: SyncSettings) -> FreeeClient:
    """Create the remote API client described by the settings."""
    retry = None
    if settings.max_retries > 0:
        retry = RetryConfig(max_attempts=settings.max_retries + 1)
    return FreeeClient(
        base_url=settings.api_url,
        access_token=settings.access_token,
        company_id=settings.company_id or None,
        timeout=settings.request_timeout,
        retry=retry,
    )


def open_history(settings: SyncSettings, create: bool = True) -> SyncHistoryStore:
    """Open the sync history database.

    With ``create=False`` a missing database is replaced by an empty in-memory
    store so that nothing is written to disk.
    """
    db_path = settings.resolved_db_path
    if not create and not db_path.exists():
        return SQLAlchemySyncHistory("sqlite://")
    return create_sqlite_history(database_path=str(db_path))


def build_converter(settings: SyncSettings) -> BeancountConverter:
    """Load the account mapping file and build a converter.

    Raises:
        ConfigurationError: If the mapping file is missing or malformed
    """
    mapper = AccountMapper.from_file(settings.mapping_path)
    return BeancountConverter(mapper, currency=settings.currency)


def build_ledger(settings: SyncSettings) -> FileSystemLedgerRepository:
    resolver = PathResolver(settings.beancount_root, settings.resolved_attachments_dir)
    return FileSystemLedgerRepository(settings.beancount_root, resolver=resolver)
