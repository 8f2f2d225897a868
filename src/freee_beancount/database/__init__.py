"""Sync history persistence for freee_beancount."""

from freee_beancount.database.base import SyncHistoryStore
from freee_beancount.database.factories import create_sqlite_history
from freee_beancount.database.sqlalchemy_db import SQLAlchemySyncHistory

__all__ = ["SyncHistoryStore", "SQLAlchemySyncHistory", "create_sqlite_history"]
