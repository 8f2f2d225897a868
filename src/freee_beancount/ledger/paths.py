"""Path resolution for month-partitioned ledger files."""

from pathlib import Path
from typing import Union

from freee_beancount.utils.date_parser import parse_month_key

LEDGER_EXTENSION = ".beancount"


class PathResolver:
    """Maps month keys and attachments onto locations under the ledger root.

    Every path is a pure function of the configured root and its arguments.
    """

    def __init__(self, root: Union[str, Path], attachments_dir: Union[str, Path, None] = None):
        self.root = Path(root)
        self.attachments_dir = Path(attachments_dir) if attachments_dir else self.root / "attachments"

    def year_dir(self, year: int) -> Path:
        return self.root / f"{year:04d}"

    def month_file(self, month_key: str) -> Path:
        """Return ``<root>/YYYY/YYYY-MM.beancount`` for a ``YYYY-MM`` key."""
        year, month = parse_month_key(month_key)
        return self.year_dir(year) / f"{year:04d}-{month:02d}{LEDGER_EXTENSION}"

    def attachment_path(self, month_key: str, filename: str) -> Path:
        year, month = parse_month_key(month_key)
        return self.attachments_dir / f"{year:04d}" / f"{month:02d}" / filename
