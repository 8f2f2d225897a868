"""Append-only repository of month-partitioned Beancount files."""

from datetime import datetime, UTC
from pathlib import Path
from typing import Optional, Union

from freee_beancount.domain.errors import LedgerIOError
from freee_beancount.ledger.paths import LEDGER_EXTENSION, PathResolver
from freee_beancount.utils.date_parser import parse_month_key


def month_header(month_key: str, generated_at: Optional[datetime] = None) -> str:
    """Return the preamble written at the top of a new month file."""
    generated_at = generated_at or datetime.now(UTC)
    return f"; Beancount file for {month_key}\n; Generated at {generated_at.isoformat()}\n\n"


class FileSystemLedgerRepository:
    """Writes formatted transactions to ``<root>/YYYY/YYYY-MM.beancount``.

    Files are only ever created or appended to, never rewritten.
    """

    def __init__(self, root: Union[str, Path], resolver: Optional[PathResolver] = None):
        self.resolver = resolver or PathResolver(root)

    @property
    def root(self) -> Path:
        return self.resolver.root

    def month_file_path(self, month_key: str) -> Path:
        return self.resolver.month_file(month_key)

    def month_file_exists(self, month_key: str) -> bool:
        return self.month_file_path(month_key).exists()

    def ensure_month_file(self, month_key: str) -> Path:
        """Create the month file with its header if it does not exist yet.

        Raises:
            LedgerIOError: If the directory or file cannot be created
        """
        path = self.month_file_path(month_key)
        if path.exists():
            return path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("x", encoding="utf-8") as fo:
                fo.write(month_header(month_key))
        except FileExistsError:
            pass
        except OSError as e:
            raise LedgerIOError(f"Failed to create ledger file {path}: {e}")
        return path

    def append_transaction(self, month_key: str, text: str, comment: Optional[str] = None) -> Path:
        """Append a formatted transaction followed by a blank line.

        The parent directory is not created here; call ``ensure_month_file`` first.

        Raises:
            LedgerIOError: If the file cannot be opened for appending
        """
        path = self.month_file_path(month_key)
        block = ""
        if comment:
            block += f"; {comment}\n"
        block += text
        if not text.endswith("\n"):
            block += "\n"
        block += "\n"
        try:
            with path.open("a", encoding="utf-8") as fo:
                fo.write(block)
        except OSError as e:
            raise LedgerIOError(f"Failed to append to ledger file {path}: {e}")
        return path

    def read_month_file(self, month_key: str) -> str:
        path = self.month_file_path(month_key)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise LedgerIOError(f"Failed to read ledger file {path}: {e}")

    def month_files_in_year(self, year: int) -> list[Path]:
        """List existing month files of a year in month order."""
        year_dir = self.resolver.year_dir(year)
        if not year_dir.is_dir():
            return []
        files = []
        for path in sorted(year_dir.glob(f"{year:04d}-??{LEDGER_EXTENSION}")):
            try:
                parse_month_key(path.name[: -len(LEDGER_EXTENSION)])
            except ValueError:
                continue
            files.append(path)
        return files
