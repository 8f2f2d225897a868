"""Tests for the freee API emulator."""

import threading
from datetime import timedelta
import pytest

from freee_beancount.domain.errors import NotFoundError, ValidationError
from freee_beancount.emulator import matching
from freee_beancount.emulator.models import WalletTxn, utcnow
from freee_beancount.emulator.schemas import DealCreate, DetailIn, PaymentIn, WalletTxnCreate


def _wallet_txn(store, amount=1100, txn_date="2024-03-05", entry_side="expense", walletable_id=1):
    return store.create_wallet_txn(
        WalletTxnCreate(
            company_id=1,
            date=txn_date,
            amount=amount,
            entry_side=entry_side,
            walletable_type="bank_account",
            walletable_id=walletable_id,
            description="feed line",
        )
    )


def _deal_request(amount=1000, tax_code=136, deal_type="expense", issue_date="2024-03-05", payments=()):
    return DealCreate(
        company_id=1,
        issue_date=issue_date,
        type=deal_type,
        details=[DetailIn(account_item_id=504, tax_code=tax_code, amount=amount, description="USB")],
        payments=list(payments),
    )


class TestMatching:
    """Tests for linking wallet txns to new deals."""

    def test_auto_match_links_exact_amount(self, emulator_store):
        txn = _wallet_txn(emulator_store, amount=1100)
        deal, unmatched = emulator_store.create_deal(_deal_request(amount=1000))

        assert deal.amount == 1100
        assert unmatched == []
        linked = emulator_store.get_wallet_txn(txn.id)
        assert linked.status == matching.SETTLED
        assert linked.deal_id == deal.id

    def test_two_candidates_link_exactly_one(self, emulator_store):
        first = _wallet_txn(emulator_store)
        second = _wallet_txn(emulator_store)

        deal, _ = emulator_store.create_deal(_deal_request())

        txns = {t.id: t for t in emulator_store.list_wallet_txns(company_id=1)}
        linked = [t for t in txns.values() if t.deal_id == deal.id]
        assert len(linked) == 1
        # The lowest id candidate wins
        assert linked[0].id == first.id
        assert txns[second.id].status == matching.UNBOOKED

    def test_second_deal_takes_remaining_candidate(self, emulator_store):
        first = _wallet_txn(emulator_store)
        second = _wallet_txn(emulator_store)
        deal_a, _ = emulator_store.create_deal(_deal_request())
        deal_b, _ = emulator_store.create_deal(_deal_request())

        assert emulator_store.get_wallet_txn(first.id).deal_id == deal_a.id
        assert emulator_store.get_wallet_txn(second.id).deal_id == deal_b.id

    def test_no_match_on_other_date_amount_or_side(self, emulator_store):
        other_date = _wallet_txn(emulator_store, txn_date="2024-03-06")
        other_amount = _wallet_txn(emulator_store, amount=1000)
        other_side = _wallet_txn(emulator_store, entry_side="income")

        deal, _ = emulator_store.create_deal(_deal_request())

        assert deal.id
        for txn in (other_date, other_amount, other_side):
            assert emulator_store.get_wallet_txn(txn.id).status == matching.UNBOOKED

    def test_negative_feed_amount_matches_by_magnitude(self, emulator_store):
        txn = _wallet_txn(emulator_store, amount=-1100)
        emulator_store.create_deal(_deal_request())
        assert emulator_store.get_wallet_txn(txn.id).status == matching.SETTLED

    def test_explicit_payment_bypasses_auto_match(self, emulator_store):
        same_amount = _wallet_txn(emulator_store, walletable_id=1)
        paid_from = _wallet_txn(emulator_store, walletable_id=2)

        payment = PaymentIn(
            date="2024-03-05", from_walletable_type="bank_account", from_walletable_id=2, amount=1100
        )
        deal, unmatched = emulator_store.create_deal(_deal_request(payments=[payment]))

        assert unmatched == []
        assert emulator_store.get_wallet_txn(paid_from.id).deal_id == deal.id
        assert emulator_store.get_wallet_txn(same_amount.id).status == matching.UNBOOKED
        assert len(deal.payments) == 1

    def test_unmatched_payment_is_reported(self, emulator_store):
        payment = PaymentIn(
            date="2024-03-05", from_walletable_type="credit_card", from_walletable_id=3, amount=1100
        )
        deal, unmatched = emulator_store.create_deal(_deal_request(payments=[payment]))
        assert deal.id
        assert unmatched == [payment]

    def test_concurrent_deals_never_double_link(self, emulator_store):
        _wallet_txn(emulator_store)
        barrier = threading.Barrier(4)

        def create():
            barrier.wait()
            emulator_store.create_deal(_deal_request())

        threads = [threading.Thread(target=create) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        txns = emulator_store.list_wallet_txns(company_id=1)
        assert len(txns) == 1
        assert txns[0].status == matching.SETTLED
        assert len(emulator_store.list_deals(company_id=1)) == 4

    def test_link_is_conditional(self, emulator_store):
        txn = _wallet_txn(emulator_store)
        with emulator_store.session_factory() as session:
            assert matching.link_wallet_txn(session, txn.id, 10)
            assert not matching.link_wallet_txn(session, txn.id, 11)
            session.commit()
        assert emulator_store.get_wallet_txn(txn.id).deal_id == 10

    def test_link_stamps_naive_utc(self, emulator_store):
        txn = _wallet_txn(emulator_store)
        with emulator_store.session_factory() as session:
            assert matching.link_wallet_txn(session, txn.id, 10)
            session.commit()
            stamped = session.get(WalletTxn, txn.id).updated_at
        assert stamped.tzinfo is None
        assert abs(utcnow() - stamped) < timedelta(minutes=1)


class TestStore:
    def test_vat_and_total(self, emulator_store):
        deal, _ = emulator_store.create_deal(_deal_request(amount=1000, tax_code=0))
        assert deal.amount == 1000
        assert deal.details[0].vat == 0
        assert deal.details[0].account_item_name == "消耗品費"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"company_id": 0}, "Missing company_id"),
            ({"issue_date": None}, "Missing issue_date"),
            ({"type": None}, "Missing type"),
            ({"type": "transfer"}, "Invalid type"),
            ({"details": []}, "Missing details"),
        ],
    )
    def test_create_deal_validation(self, emulator_store, overrides, message):
        request = _deal_request().model_copy(update=overrides)
        with pytest.raises(ValidationError, match=message):
            emulator_store.create_deal(request)

    def test_missing_records(self, emulator_store):
        with pytest.raises(NotFoundError, match="Deal 5 not found"):
            emulator_store.get_deal(5)
        with pytest.raises(NotFoundError):
            emulator_store.delete_wallet_txn(5)

    def test_list_deals_filters_and_pages(self, emulator_store):
        for day in ("2024-02-29", "2024-03-01", "2024-03-15", "2024-03-31", "2024-04-01"):
            emulator_store.create_deal(_deal_request(issue_date=day))

        from datetime import date

        march = emulator_store.list_deals(
            company_id=1, issue_date_from=date(2024, 3, 1), issue_date_to=date(2024, 3, 31)
        )
        assert [str(d.issue_date) for d in march] == ["2024-03-01", "2024-03-15", "2024-03-31"]
        page = emulator_store.list_deals(company_id=1, limit=2, offset=2)
        assert [str(d.issue_date) for d in page] == ["2024-03-15", "2024-03-31"]
        assert emulator_store.list_deals(company_id=2) == []

    def test_status_aliases(self, emulator_store):
        _wallet_txn(emulator_store, amount=1100)
        _wallet_txn(emulator_store, amount=2200)
        emulator_store.create_deal(_deal_request())

        assert [t.amount for t in emulator_store.list_wallet_txns(status="1")] == [2200]
        assert [t.amount for t in emulator_store.list_wallet_txns(status="2")] == [1100]
        assert [t.amount for t in emulator_store.list_wallet_txns(status="settled")] == [1100]

    def test_tokens(self, emulator_store):
        token = emulator_store.issue_token(60)
        refresh = emulator_store.issue_token(60, kind="refresh")
        expired = emulator_store.issue_token(-1)

        assert emulator_store.validate_token(token)
        assert not emulator_store.validate_token(refresh)
        assert not emulator_store.validate_token(expired)
        assert not emulator_store.validate_token("unknown")
        emulator_store.revoke_token(token)
        assert not emulator_store.validate_token(token)


class TestAPI:
    def test_health_is_public(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.parametrize(
        "headers, description",
        [
            ({}, "Missing Authorization header"),
            ({"Authorization": "Token abc"}, "Invalid Authorization header format"),
            ({"Authorization": "Bearer nope"}, "Invalid or expired token"),
        ],
    )
    def test_api_requires_bearer_token(self, api, headers, description):
        response = api.get("/api/1/deals", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized", "error_description": description}

    def test_api_checks_token_expiry(self, api, emulator_store):
        expired = emulator_store.issue_token(-1)
        response = api.get("/api/1/deals", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401
        assert response.json()["error_description"] == "Invalid or expired token"

        fresh = emulator_store.issue_token(60)
        response = api.get("/api/1/deals", headers={"Authorization": f"Bearer {fresh}"})
        assert response.status_code == 200

    def test_token_requires_grant_type(self, api):
        response = api.post("/oauth/token", data={})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_token_response(self, api):
        body = api.post("/oauth/token", data={"grant_type": "client_credentials"}).json()
        assert body["token_type"] == "Bearer"
        assert body["expires_in"] == 3600
        assert body["company_id"] == 1

    def test_deal_crud(self, api, auth_headers):
        created = api.post(
            "/api/1/deals",
            json={
                "company_id": 1,
                "issue_date": "2024-03-05",
                "type": "expense",
                "details": [{"account_item_id": 505, "tax_code": 136, "amount": 3000}],
            },
            headers=auth_headers,
        )
        assert created.status_code == 201
        deal = created.json()["deal"]
        assert deal["amount"] == 3300
        assert deal["details"][0]["account_item_name"] == "通信費"

        fetched = api.get(f"/api/1/deals/{deal['id']}", headers=auth_headers)
        assert fetched.json()["deal"]["id"] == deal["id"]

        updated = api.put(
            f"/api/1/deals/{deal['id']}",
            json={"ref_number": "INV-9", "details": [{"account_item_id": 505, "amount": 500}]},
            headers=auth_headers,
        )
        assert updated.json()["deal"]["ref_number"] == "INV-9"
        assert updated.json()["deal"]["amount"] == 500

        assert api.delete(f"/api/1/deals/{deal['id']}", headers=auth_headers).status_code == 204
        missing = api.get(f"/api/1/deals/{deal['id']}", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    def test_deal_validation_error(self, api, auth_headers):
        response = api.post(
            "/api/1/deals", json={"company_id": 1, "type": "expense"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": "invalid_parameter",
            "error_description": "Missing issue_date",
        }

    def test_malformed_body(self, api, auth_headers):
        response = api.post("/api/1/deals", json={"details": "nope"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_list_deals_by_date(self, api, auth_headers, emulator_store):
        emulator_store.create_deal(_deal_request(issue_date="2024-03-05"))
        emulator_store.create_deal(_deal_request(issue_date="2024-04-05"))
        response = api.get(
            "/api/1/deals",
            params={"company_id": 1, "issue_date_from": "2024-03-01", "issue_date_to": "2024-03-31"},
            headers=auth_headers,
        )
        assert [d["issue_date"] for d in response.json()["deals"]] == ["2024-03-05"]

    def test_invalid_date_filter(self, api, auth_headers):
        response = api.get(
            "/api/1/deals", params={"issue_date_from": "March"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_journals(self, api, auth_headers):
        created = api.post(
            "/api/1/journals",
            json={
                "company_id": 1,
                "issue_date": "2024-03-10",
                "details": [
                    {"entry_type": "debit", "account_item_id": 102, "amount": 5000},
                    {"entry_type": "credit", "account_item_id": 101, "amount": 5000},
                ],
            },
            headers=auth_headers,
        )
        assert created.status_code == 201
        journal_id = created.json()["journal"]["id"]
        listed = api.get("/api/1/journals", params={"company_id": 1}, headers=auth_headers).json()
        assert [j["id"] for j in listed["journals"]] == [journal_id]
        names = [d["account_item_name"] for d in listed["journals"][0]["details"]]
        assert names == ["普通預金", "現金"]

    def test_wallet_txn_crud_and_status_filter(self, api, auth_headers):
        created = api.post(
            "/api/1/wallet_txns",
            json={
                "company_id": 1,
                "date": "2024-03-05",
                "amount": 1100,
                "walletable_type": "bank_account",
                "walletable_id": 1,
            },
            headers=auth_headers,
        )
        assert created.status_code == 201
        txn_id = created.json()["wallet_txn"]["id"]
        assert created.json()["wallet_txn"]["status"] == "unbooked"

        unbooked = api.get("/api/1/wallet_txns", params={"status": "1"}, headers=auth_headers)
        assert [t["id"] for t in unbooked.json()["wallet_txns"]] == [txn_id]

        updated = api.put(
            f"/api/1/wallet_txns/{txn_id}", json={"status": "passed"}, headers=auth_headers
        )
        assert updated.json()["wallet_txn"]["status"] == "passed"
        invalid = api.put(
            f"/api/1/wallet_txns/{txn_id}", json={"status": "lost"}, headers=auth_headers
        )
        assert invalid.status_code == 400

        assert api.delete(f"/api/1/wallet_txns/{txn_id}", headers=auth_headers).status_code == 204
        assert api.get(f"/api/1/wallet_txns/{txn_id}", headers=auth_headers).status_code == 404

    def test_receipts(self, api, auth_headers, tmp_path):
        created = api.post(
            "/api/1/receipts",
            data={"company_id": "1", "issue_date": "2024-03-05", "description": "taxi"},
            files={"receipt": ("taxi.pdf", b"%PDF-1.4 fake", "application/pdf")},
            headers=auth_headers,
        )
        assert created.status_code == 201
        receipt = created.json()["receipt"]
        assert receipt["status"] == "unconfirmed"
        stored = tmp_path / "receipts" / "1" / f"{receipt['id']}.pdf"
        assert stored.read_bytes() == b"%PDF-1.4 fake"

        listed = api.get("/api/1/receipts", params={"company_id": 1}, headers=auth_headers)
        assert [r["id"] for r in listed.json()["receipts"]] == [receipt["id"]]

        assert api.delete(f"/api/1/receipts/{receipt['id']}", headers=auth_headers).status_code == 204
        assert not stored.exists()

    def test_receipt_requires_file(self, api, auth_headers):
        response = api.post(
            "/api/1/receipts",
            data={"company_id": "1", "issue_date": "2024-03-05"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error_description"] == "Missing receipt file"

    def test_reference_data(self, api, auth_headers):
        companies = api.get("/api/1/companies", headers=auth_headers).json()["companies"]
        assert companies[0]["id"] == 1

        missing = api.get("/api/1/account_items", headers=auth_headers)
        assert missing.status_code == 400
        assert missing.json()["error_description"] == "company_id is required"

        items = api.get("/api/1/account_items", params={"company_id": 1}, headers=auth_headers)
        assert any(item["name"] == "売上高" for item in items.json()["account_items"])

        cards = api.get(
            "/api/1/walletables", params={"company_id": 1, "type": "credit_card"}, headers=auth_headers
        ).json()["walletables"]
        assert cards and all(w["type"] == "credit_card" for w in cards)
