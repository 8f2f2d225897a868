"""Tests for the freee-sync command line interface."""

import pytest
from datetime import date

from freee_beancount.cli.main import cli
from freee_beancount.config import SyncSettings
from freee_beancount.database.factories import create_sqlite_history
from freee_beancount.domain.entities import SyncRecord, SyncType



@pytest.fixture
def settings(ledger_root, mapping_path):
    return SyncSettings(
        api_url="http://freee.test",
        access_token="tok",
        company_id=1,
        beancount_root=str(ledger_root),
        db_path=None,
        mapping_path=str(mapping_path),
        client_id=None,
        client_secret=None,
    )


def _invoke(cli_runner, args, settings, client=None):
    obj = {"settings": settings}
    if client is not None:
        obj["client_factory"] = lambda _settings: client
    return cli_runner.invoke(cli, args, obj=obj)


class TestSyncCommand:
    def test_sync_writes_ledger(self, fake_client, cli_runner, settings, make_deal, ledger_root):
        client = fake_client(deals=[make_deal(deal_id=1), make_deal(deal_id=2, issue_date=date(2024, 3, 28))])
        result = _invoke(cli_runner, ["sync", "--from", "2024-03-01", "--to", "2024-03-31"], settings, client)

        assert result.exit_code == 0, result.output
        assert "Deals: 2 synced, 0 already synced" in result.output
        assert "Files written: 1" in result.output
        assert "Total synced: 2 deals, 0 journals" in result.output
        assert (ledger_root / "2024" / "2024-03.beancount").exists()
        assert (ledger_root / ".sync" / "sync.db").exists()
        assert client.calls[0] == ("deals", date(2024, 3, 1), date(2024, 3, 31))

    def test_sync_twice_reports_already_synced(self, fake_client, cli_runner, settings, make_deal):
        client = fake_client(deals=[make_deal(deal_id=1)])
        args = ["sync", "--from", "2024-03-01", "--to", "2024-03-31"]
        _invoke(cli_runner, args, settings, client)
        result = _invoke(cli_runner, args, settings, client)

        assert result.exit_code == 0
        assert "Deals: 0 synced, 1 already synced" in result.output
        assert "Files written: 0" in result.output

    def test_dry_run_writes_nothing(self, fake_client, cli_runner, settings, make_deal, ledger_root):
        client = fake_client(deals=[make_deal(deal_id=1, description="preview me")])
        result = _invoke(
            cli_runner,
            ["sync", "--from", "2024-03-01", "--to", "2024-03-31", "--dry-run"],
            settings,
            client,
        )

        assert result.exit_code == 0, result.output
        assert "[DRY RUN] Would append to" in result.output
        assert '"preview me"' in result.output
        assert "Dry run: 1 deals and 0 journals would be synced" in result.output
        assert list(ledger_root.iterdir()) == []

    def test_missing_configuration(self, fake_client, cli_runner, settings):
        incomplete = settings.model_copy(update={"access_token": None, "company_id": 0})
        result = _invoke(
            cli_runner, ["sync", "--from", "2024-03-01", "--to", "2024-03-31"], incomplete, fake_client()
        )

        assert result.exit_code == 1
        assert "Missing required configuration: FREEE_ACCESS_TOKEN, FREEE_COMPANY_ID" in result.output

    def test_missing_mapping_file(self, fake_client, cli_runner, settings, tmp_path):
        broken = settings.model_copy(update={"mapping_path": str(tmp_path / "nope.yaml")})
        result = _invoke(
            cli_runner, ["sync", "--from", "2024-03-01", "--to", "2024-03-31"], broken, fake_client()
        )
        assert result.exit_code == 1
        assert "Account mapping file not found" in result.output

    def test_dates_are_required(self, fake_client, cli_runner, settings):
        result = _invoke(cli_runner, ["sync", "--from", "2024-03-01"], settings, fake_client())
        assert result.exit_code != 0

    def test_invalid_date(self, fake_client, cli_runner, settings):
        result = _invoke(cli_runner, ["sync", "--from", "someday", "--to", "2024-03-31"], settings, fake_client())
        assert result.exit_code == 1
        assert "Error: Invalid date" in result.output

    def test_reversed_range(self, fake_client, cli_runner, settings):
        result = _invoke(cli_runner, ["sync", "--from", "2024-04-01", "--to", "2024-03-31"], settings, fake_client())
        assert result.exit_code == 1
        assert "is after" in result.output

    def test_remote_error_exits_nonzero(self, fake_client, cli_runner, settings):
        from freee_beancount.domain.errors import RemoteAPIError

        client = fake_client(error=RemoteAPIError("Failed to fetch deals at offset 0: freee API error: unauthorized"))
        result = _invoke(cli_runner, ["sync", "--from", "2024-03-01", "--to", "2024-03-31"], settings, client)
        assert result.exit_code == 1
        assert "Error: Failed to fetch deals at offset 0" in result.output

    def test_root_option_overrides_settings(self, fake_client, cli_runner, settings, make_deal, tmp_path):
        other_root = tmp_path / "other"
        client = fake_client(deals=[make_deal()])
        result = _invoke(
            cli_runner,
            ["--root", str(other_root), "sync", "--from", "2024-03-01", "--to", "2024-03-31"],
            settings,
            client,
        )
        assert result.exit_code == 0, result.output
        assert (other_root / "2024" / "2024-03.beancount").exists()


class TestStatsCommand:
    def test_stats_without_database(self, cli_runner, settings, ledger_root):
        result = _invoke(cli_runner, ["stats"], settings)

        assert result.exit_code == 0, result.output
        assert "Deals synced:       0" in result.output
        assert "Last sync:          never" in result.output
        assert not (ledger_root / ".sync").exists()

    def test_stats_counts(self, fake_client, cli_runner, settings, make_deal, make_journal):
        client = fake_client(deals=[make_deal(deal_id=1), make_deal(deal_id=2)], journals=[make_journal()])
        _invoke(cli_runner, ["sync", "--from", "2024-03-01", "--to", "2024-03-31"], settings, client)

        result = _invoke(cli_runner, ["stats"], settings)
        assert result.exit_code == 0
        assert "Deals synced:       2" in result.output
        assert "Journals synced:    1" in result.output
        assert "Schema version:     1.0.0" in result.output


class TestForgetCommand:
    def test_forget_existing_record(self, cli_runner, settings):
        history = create_sqlite_history(database_path=str(settings.resolved_db_path))
        history.record_sync(
            SyncRecord(
                sync_type=SyncType.DEAL,
                freee_id=1,
                issue_date=date(2024, 3, 5),
                amount=1100,
                beancount_file="2024/2024-03.beancount",
            )
        )
        history.disconnect()

        result = _invoke(cli_runner, ["forget", "deal", "1"], settings)
        assert result.exit_code == 0
        assert "Forgot deal 1" in result.output

        again = _invoke(cli_runner, ["forget", "deal", "1"], settings)
        assert again.exit_code == 1
        assert "Error: deal 1 has not been synced" in again.output

    def test_forget_rejects_unknown_type(self, cli_runner, settings):
        result = _invoke(cli_runner, ["forget", "receipt", "1"], settings)
        assert result.exit_code != 0


class TestAuthCommand:
    def test_auth_prints_token(self, cli_runner, settings):
        class TokenClient:
            def get_access_token(self, client_id, client_secret):
                assert (client_id, client_secret) == ("id", "secret")
                return "issued-token"

            def close(self):
                pass

        configured = settings.model_copy(update={"client_id": "id", "client_secret": "secret"})
        result = _invoke(cli_runner, ["auth"], configured, TokenClient())
        assert result.exit_code == 0
        assert "FREEE_ACCESS_TOKEN=issued-token" in result.output

    def test_auth_requires_credentials(self, cli_runner, settings):
        result = _invoke(cli_runner, ["auth"], settings)
        assert result.exit_code == 1
        assert "FREEE_CLIENT_ID, FREEE_CLIENT_SECRET" in result.output
