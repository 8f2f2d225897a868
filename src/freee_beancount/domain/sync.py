"""Sync orchestration: remote transactions into month ledger files."""

import sys
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, TextIO, Union

from freee_beancount.client.freee_client import FreeeClient
from freee_beancount.database.base import SyncHistoryStore
from freee_beancount.domain.converter import BeancountConverter, format_transaction
from freee_beancount.domain.entities import (
    ConversionResult,
    Deal,
    Journal,
    SyncRecord,
    SyncStats,
    SyncType,
)
from freee_beancount.domain.errors import DuplicateSyncError, HistoryWriteError, LedgerIOError
from freee_beancount.ledger.repository import FileSystemLedgerRepository
from freee_beancount.logging_context import LoggingContext


@dataclass
class MonthBatch:
    """New deals and journals filed under one ``YYYY-MM`` key."""

    deals: list[Deal] = field(default_factory=list)
    journals: list[Journal] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.deals) + len(self.journals)


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    dry_run: bool
    deals_fetched: int = 0
    journals_fetched: int = 0
    deals_skipped: int = 0
    journals_skipped: int = 0
    deals_synced: int = 0
    journals_synced: int = 0
    files_written: list[Path] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: Optional[SyncStats] = None

    @property
    def items_synced(self) -> int:
        return self.deals_synced + self.journals_synced


def drop_repeated_ids(items: list) -> list:
    """Keep the first occurrence of each remote ID, preserving fetch order."""
    seen: set[int] = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def group_by_month(deals: list[Deal], journals: list[Journal]) -> dict[str, MonthBatch]:
    """Group transactions by the month of their issue date, months in ascending order."""
    batches: dict[str, MonthBatch] = defaultdict(MonthBatch)
    for deal in deals:
        batches[deal.year_month()].deals.append(deal)
    for journal in journals:
        batches[journal.year_month()].journals.append(journal)
    return {key: batches[key] for key in sorted(batches)}


class SyncService:
    """Fetches, deduplicates, converts and appends remote transactions.

    Runs are sequential. Nothing is retried here; a failed fetch aborts the run
    while a failed append or history write only skips that one item.
    """

    def __init__(
        self,
        client: FreeeClient,
        converter: BeancountConverter,
        history: SyncHistoryStore,
        ledger: FileSystemLedgerRepository,
        log: LoggingContext,
        preview: Optional[TextIO] = None,
    ):
        """Initialize sync service.

        Args:
            client: Remote API client
            converter: Converter from remote transactions to ledger transactions
            history: Sync history store used for deduplication
            ledger: Month file repository
            log: Logging context for this invocation
            preview: Stream receiving dry-run output (defaults to stdout)
        """
        self.client = client
        self.converter = converter
        self.history = history
        self.ledger = ledger
        self.log = log
        self.preview = preview

    def sync(
        self, date_from: Union[date, str], date_to: Union[date, str], dry_run: bool = False
    ) -> SyncResult:
        """Sync every deal and journal issued between date_from and date_to inclusive.

        Raises:
            RemoteAPIError: If fetching any page fails
        """
        result = SyncResult(dry_run=dry_run)

        self.log.info(f"Fetching deals from {date_from} to {date_to}")
        deals = self.client.fetch_all_deals(date_from, date_to)
        self.log.info(f"Fetching journals from {date_from} to {date_to}")
        journals = self.client.fetch_all_journals(date_from, date_to)
        result.deals_fetched = len(deals)
        result.journals_fetched = len(journals)

        # offset paging may return the same transaction twice
        unique_deals = drop_repeated_ids(deals)
        unique_journals = drop_repeated_ids(journals)
        repeated = len(deals) - len(unique_deals) + len(journals) - len(unique_journals)
        if repeated:
            self.log.warning(f"Dropped {repeated} transactions repeated within this fetch")

        synced_deals = self.history.get_synced_ids(SyncType.DEAL)
        synced_journals = self.history.get_synced_ids(SyncType.JOURNAL)
        new_deals = [d for d in unique_deals if d.id not in synced_deals]
        new_journals = [j for j in unique_journals if j.id not in synced_journals]
        result.deals_skipped = len(unique_deals) - len(new_deals)
        result.journals_skipped = len(unique_journals) - len(new_journals)
        self.log.info(
            f"Found {len(unique_deals)} deals ({len(new_deals)} new) "
            f"and {len(unique_journals)} journals ({len(new_journals)} new)"
        )

        batches = group_by_month(new_deals, new_journals)
        for month_key, batch in batches.items():
            if dry_run:
                self._preview_month(month_key, batch, result)
            else:
                self._write_month(month_key, batch, result)

        if not dry_run:
            result.stats = self.history.get_stats()
        self._report(result)
        return result

    def _preview_month(self, month_key: str, batch: MonthBatch, result: SyncResult) -> None:
        stream = self.preview or sys.stdout
        path = self.ledger.month_file_path(month_key)
        stream.write(f"[DRY RUN] Would append to {path}:\n")
        for _, conversion in self._convert_batch(batch, result):
            stream.write(format_transaction(conversion.transaction))
            stream.write("\n")

    def _write_month(self, month_key: str, batch: MonthBatch, result: SyncResult) -> None:
        try:
            path = self.ledger.ensure_month_file(month_key)
        except LedgerIOError as e:
            self.log.error(f"Skipping {len(batch)} transactions for {month_key}: {e}")
            result.failures.append(str(e))
            return

        self.log.info(f"Writing {len(batch)} transactions to {path}")
        written = False
        for item, conversion in self._convert_batch(batch, result):
            label = self._label(item)
            try:
                self.ledger.append_transaction(month_key, format_transaction(conversion.transaction))
            except LedgerIOError as e:
                self.log.error(f"Failed to write {label}: {e}")
                result.failures.append(f"{label}: {e}")
                continue
            written = True

            try:
                self.history.record_sync(self._sync_record(item, path))
            except DuplicateSyncError as e:
                self.log.warning(f"{label} already recorded: {e}")
                continue
            except HistoryWriteError as e:
                self.log.error(f"Failed to record {label}: {e}")
                result.failures.append(f"{label}: {e}")
                continue

            if isinstance(item, Deal):
                result.deals_synced += 1
            else:
                result.journals_synced += 1

        if written:
            result.files_written.append(path)

    def _convert_batch(
        self, batch: MonthBatch, result: SyncResult
    ) -> list[tuple[Union[Deal, Journal], ConversionResult]]:
        conversions: list[tuple[Union[Deal, Journal], ConversionResult]] = []
        for deal in batch.deals:
            conversions.append((deal, self.converter.convert_deal(deal)))
        for journal in batch.journals:
            conversions.append((journal, self.converter.convert_journal(journal)))
        for item, conversion in conversions:
            for warning in conversion.warnings:
                self.log.warning(f"{self._label(item)}: {warning}")
                result.warnings.append(warning)
        return conversions

    @staticmethod
    def _label(item: Union[Deal, Journal]) -> str:
        kind = "deal" if isinstance(item, Deal) else "journal"
        return f"{kind} {item.id}"

    @staticmethod
    def _sync_record(item: Union[Deal, Journal], path: Path) -> SyncRecord:
        if isinstance(item, Deal):
            return SyncRecord(
                sync_type=SyncType.DEAL,
                freee_id=item.id,
                issue_date=item.issue_date,
                amount=item.amount,
                beancount_file=str(path),
            )
        return SyncRecord(
            sync_type=SyncType.JOURNAL,
            freee_id=item.id,
            issue_date=item.issue_date,
            amount=item.debit_total,
            beancount_file=str(path),
        )

    def _report(self, result: SyncResult) -> None:
        if result.dry_run:
            self.log.info("Dry run complete, nothing was written")
            return
        self.log.info(
            f"Synced {result.deals_synced} deals and {result.journals_synced} journals "
            f"into {len(result.files_written)} files"
        )
        if result.failures:
            self.log.warning(f"{len(result.failures)} transactions failed and were skipped")
        if result.stats is not None:
            self.log.info(
                f"History: {result.stats.total_deals} deals, "
                f"{result.stats.total_journals} journals, "
                f"{result.stats.total_documents} documents"
            )
