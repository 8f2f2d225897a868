"""Shared pytest fixtures for freee_beancount tests."""

import tempfile
import os
from datetime import date
from pathlib import Path
import pytest

from freee_beancount.database.factories import create_sqlite_history
from freee_beancount.domain.converter import BeancountConverter
from freee_beancount.domain.entities import (
    Deal,
    DealType,
    Detail,
    EntryType,
    Journal,
    JournalDetail,
)
from freee_beancount.domain.mapper import AccountMapper
from freee_beancount.emulator.app import create_app
from freee_beancount.emulator.config import EmulatorSettings
from freee_beancount.emulator.store import EmulatorStore
from freee_beancount.ledger.repository import FileSystemLedgerRepository
from freee_beancount.logging_context import LoggingContext, LogLevel

MAPPING_PATH = Path(__file__).parent.parent / "config" / "account-mapping.yaml"


@pytest.fixture
def temp_history():
    """Create a temporary sync history database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    history = create_sqlite_history(database_path=db_path)
    # Store the path for tests that need it
    history.database_path = db_path
    history.connect()

    yield history

    # Cleanup
    history.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger_root(tmp_path):
    """Return an empty ledger root directory."""
    root = tmp_path / "beancount"
    root.mkdir()
    return root


@pytest.fixture
def ledger(ledger_root):
    return FileSystemLedgerRepository(ledger_root)


@pytest.fixture
def mapping_path():
    """Return the account mapping shipped with the project."""
    return MAPPING_PATH


@pytest.fixture
def mapper(mapping_path):
    return AccountMapper.from_file(mapping_path)


@pytest.fixture
def converter(mapper):
    return BeancountConverter(mapper)


@pytest.fixture
def log():
    """Logging context for services under test."""
    with LoggingContext(LogLevel.DEBUG) as context:
        yield context


@pytest.fixture
def make_deal():
    """Factory for expense/income deals with a single detail line."""

    def _make_deal(
        deal_id=1,
        issue_date=date(2024, 3, 5),
        deal_type=DealType.EXPENSE,
        account="消耗品費",
        amount=1000,
        vat=0,
        description=None,
        **kwargs,
    ):
        return Deal(
            id=deal_id,
            company_id=1,
            issue_date=issue_date,
            type=deal_type,
            details=(
                Detail(
                    account_item_name=account,
                    amount=amount,
                    vat=vat,
                    tax_code=136 if vat else 0,
                    description=description,
                ),
            ),
            amount=amount + vat,
            **kwargs,
        )

    return _make_deal


@pytest.fixture
def make_journal():
    """Factory for balanced two-line journals."""

    def _make_journal(journal_id=1, issue_date=date(2024, 3, 10), amount=5000, description=None):
        return Journal(
            id=journal_id,
            company_id=1,
            issue_date=issue_date,
            details=(
                JournalDetail(
                    entry_type=EntryType.DEBIT,
                    account_item_name="普通預金",
                    amount=amount,
                    description=description,
                ),
                JournalDetail(
                    entry_type=EntryType.CREDIT,
                    account_item_name="現金",
                    amount=amount,
                ),
            ),
        )

    return _make_journal


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def emulator_store(tmp_path):
    """In-memory emulator store with receipts uploaded under tmp_path."""
    return EmulatorStore("sqlite://", upload_dir=tmp_path / "receipts")


@pytest.fixture
def emulator_app(emulator_store, tmp_path):
    settings = EmulatorSettings(
        db_path=str(tmp_path / "unused.db"),
        upload_dir=str(tmp_path / "receipts"),
        token_ttl=3600,
    )
    return create_app(settings=settings, store=emulator_store)


@pytest.fixture
def api(emulator_app):
    """Unauthenticated test client for the emulator."""
    from fastapi.testclient import TestClient

    with TestClient(emulator_app) as client:
        yield client


@pytest.fixture
def token(api):
    response = api.post("/oauth/token", data={"grant_type": "client_credentials"})
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


class FakeClient:
    """Serves fixed deals and journals, ignoring the date range."""

    def __init__(self, deals=(), journals=(), error=None):
        self.deals = list(deals)
        self.journals = list(journals)
        self.error = error
        self.calls = []

    def fetch_all_deals(self, date_from, date_to):
        self.calls.append(("deals", date_from, date_to))
        if self.error is not None:
            raise self.error
        return list(self.deals)

    def fetch_all_journals(self, date_from, date_to):
        self.calls.append(("journals", date_from, date_to))
        return list(self.journals)

    def close(self):
        pass


@pytest.fixture
def fake_client():
    """Factory for remote clients that serve canned transactions."""
    return FakeClient
