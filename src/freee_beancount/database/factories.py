"""Database factory functions for creating sync history stores."""

import os
from pathlib import Path
from typing import Optional

from freee_beancount.database.sqlalchemy_db import SQLAlchemySyncHistory

DEFAULT_DB_RELATIVE_PATH = Path(".sync") / "sync.db"


def create_sqlite_history(
    database_path: Optional[str] = None, beancount_root: Optional[str] = None
) -> SQLAlchemySyncHistory:
    """Create a SQLite-backed sync history store.

    Args:
        database_path: Path to SQLite database file. If None, checks BEANCOUNT_DB_PATH
            environment variable, then defaults to <beancount_root>/.sync/sync.db
        beancount_root: Ledger root used for the default location

    Returns:
        SQLAlchemySyncHistory instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("BEANCOUNT_DB_PATH")

    if database_path is None:
        root = Path(beancount_root or os.environ.get("BEANCOUNT_ROOT", "./beancount"))
        database_path = str(root / DEFAULT_DB_RELATIVE_PATH)

    Path(database_path).parent.mkdir(parents=True, exist_ok=True)
    database_url = f"sqlite:///{database_path}"
    return SQLAlchemySyncHistory(database_url)
