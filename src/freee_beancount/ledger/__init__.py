"""Ledger file output for freee_beancount."""

from freee_beancount.ledger.paths import PathResolver
from freee_beancount.ledger.repository import FileSystemLedgerRepository, month_header

__all__ = ["PathResolver", "FileSystemLedgerRepository", "month_header"]
