"""SQLAlchemy-backed store for the emulator."""

import logging
import secrets
import threading
from contextlib import contextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from freee_beancount.domain.entities import DealType, EntryType, WalletableType
from freee_beancount.domain.errors import NotFoundError, ValidationError, not_found
from freee_beancount.emulator import matching
from freee_beancount.emulator.catalog import account_item_name
from freee_beancount.emulator.models import (
    AccessToken,
    Deal,
    DealDetail,
    DealPayment,
    Journal,
    JournalDetail,
    Receipt,
    WalletTxn,
    create_session_factory,
    utcnow,
)
from freee_beancount.emulator.schemas import (
    DealCreate,
    DealOut,
    DealUpdate,
    DetailIn,
    JournalCreate,
    JournalOut,
    PaymentIn,
    ReceiptOut,
    WalletTxnCreate,
    WalletTxnOut,
    WalletTxnUpdate,
)
from freee_beancount.utils.date_parser import parse_iso_date

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_ID = 1
WALLET_TXN_STATUSES = (matching.UNBOOKED, matching.SETTLED, matching.PASSED)


def _require_date(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"Missing {field_name}")
    return parse_iso_date(value)


def _optional_date(value: Optional[str]) -> Optional[date]:
    return parse_iso_date(value) if value else None


def detail_vat(detail: DetailIn) -> int:
    """Simplified consumption tax: 10% of the amount for any taxable code."""
    return detail.amount // 10 if detail.tax_code != 0 else 0


class EmulatorStore:
    """Persistence for deals, journals, wallet txns, receipts and tokens.

    Writes are serialized by a store-wide lock so that ID allocation and
    match-and-link run as one unit per request.
    """

    def __init__(self, database_url: str, upload_dir: str | Path = "./data/receipts"):
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self.upload_dir = Path(upload_dir)
        self._write_lock = threading.Lock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self.session_factory() as session:
            yield session

    @contextmanager
    def _write(self) -> Iterator[Session]:
        with self._write_lock, self.session_factory() as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    # Deals
    def create_deal(self, req: DealCreate) -> tuple[DealOut, list[PaymentIn]]:
        """Create a deal and link wallet txns to it.

        Returns the deal and the explicit payments that matched no wallet txn.

        Raises:
            ValidationError: If a required field is missing or malformed
        """
        if not req.company_id:
            raise ValidationError("Missing company_id")
        issue_date = _require_date(req.issue_date, "issue_date")
        if not req.type:
            raise ValidationError("Missing type")
        if req.type not in (DealType.INCOME.value, DealType.EXPENSE.value):
            raise ValidationError(f"Invalid type: {req.type}")
        if not req.details:
            raise ValidationError("Missing details")
        due_date = _optional_date(req.due_date)

        with self._write() as session:
            deal = Deal(
                company_id=req.company_id,
                issue_date=issue_date,
                due_date=due_date,
                type=req.type,
                ref_number=req.ref_number,
                partner_id=req.partner_id,
                partner_code=req.partner_code,
            )
            deal.details = self._build_details(req.details)
            deal.amount = sum(d.amount + d.vat for d in deal.details)
            deal.payments = [
                DealPayment(
                    date=_require_date(p.date, "payment date"),
                    amount=p.amount,
                    from_walletable_type=p.from_walletable_type,
                    from_walletable_id=p.from_walletable_id,
                )
                for p in req.payments
            ]
            session.add(deal)
            session.flush()

            unmatched: list[PaymentIn] = []
            if req.payments:
                unmatched = matching.link_payments(session, deal.id, req.company_id, req.payments)
            else:
                matching.auto_link(
                    session, deal.id, req.company_id, issue_date, deal.amount, req.type
                )
            out = DealOut.model_validate(deal)
        return out, unmatched

    @staticmethod
    def _build_details(details: list[DetailIn]) -> list[DealDetail]:
        return [
            DealDetail(
                account_item_id=d.account_item_id,
                account_item_name=account_item_name(d.account_item_id),
                tax_code=d.tax_code,
                amount=d.amount,
                vat=detail_vat(d),
                description=d.description,
                item_id=d.item_id,
                section_id=d.section_id,
            )
            for d in details
        ]

    def get_deal(self, deal_id: int) -> DealOut:
        with self._session() as session:
            deal = session.get(Deal, deal_id)
            if deal is None:
                raise NotFoundError(not_found("Deal", deal_id))
            return DealOut.model_validate(deal)

    def list_deals(
        self,
        company_id: Optional[int] = None,
        issue_date_from: Optional[date] = None,
        issue_date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[DealOut]:
        """List deals in id order, filtered by company and inclusive issue date range."""
        with self._session() as session:
            query = session.query(Deal)
            if company_id is not None:
                query = query.filter(Deal.company_id == company_id)
            if issue_date_from is not None:
                query = query.filter(Deal.issue_date >= issue_date_from)
            if issue_date_to is not None:
                query = query.filter(Deal.issue_date <= issue_date_to)
            query = query.order_by(Deal.id).offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [DealOut.model_validate(deal) for deal in query.all()]

    def update_deal(self, deal_id: int, req: DealUpdate) -> DealOut:
        with self._write() as session:
            deal = session.get(Deal, deal_id)
            if deal is None:
                raise NotFoundError(not_found("Deal", deal_id))
            if req.issue_date is not None:
                deal.issue_date = parse_iso_date(req.issue_date)
            if req.due_date is not None:
                deal.due_date = parse_iso_date(req.due_date)
            if req.ref_number is not None:
                deal.ref_number = req.ref_number
            if req.partner_id is not None:
                deal.partner_id = req.partner_id
            if req.details:
                deal.details = self._build_details(req.details)
                deal.amount = sum(d.amount + d.vat for d in deal.details)
            deal.updated_at = utcnow()
            session.flush()
            return DealOut.model_validate(deal)

    def delete_deal(self, deal_id: int) -> None:
        with self._write() as session:
            deal = session.get(Deal, deal_id)
            if deal is None:
                raise NotFoundError(not_found("Deal", deal_id))
            session.delete(deal)

    # Journals
    def create_journal(self, req: JournalCreate) -> JournalOut:
        if not req.company_id:
            raise ValidationError("Missing company_id")
        issue_date = _require_date(req.issue_date, "issue_date")
        if not req.details:
            raise ValidationError("Missing details")
        for d in req.details:
            if d.entry_type not in (EntryType.DEBIT.value, EntryType.CREDIT.value):
                raise ValidationError(f"Invalid entry_type: {d.entry_type}")

        with self._write() as session:
            journal = Journal(company_id=req.company_id, issue_date=issue_date)
            journal.details = [
                JournalDetail(
                    entry_type=d.entry_type,
                    account_item_id=d.account_item_id,
                    account_item_name=account_item_name(d.account_item_id),
                    tax_code=d.tax_code,
                    partner_id=d.partner_id,
                    amount=d.amount,
                    vat=d.vat,
                    description=d.description,
                )
                for d in req.details
            ]
            session.add(journal)
            session.flush()
            return JournalOut.model_validate(journal)

    def get_journal(self, journal_id: int) -> JournalOut:
        with self._session() as session:
            journal = session.get(Journal, journal_id)
            if journal is None:
                raise NotFoundError(not_found("Journal", journal_id))
            return JournalOut.model_validate(journal)

    def list_journals(
        self,
        company_id: Optional[int] = None,
        issue_date_from: Optional[date] = None,
        issue_date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[JournalOut]:
        with self._session() as session:
            query = session.query(Journal)
            if company_id is not None:
                query = query.filter(Journal.company_id == company_id)
            if issue_date_from is not None:
                query = query.filter(Journal.issue_date >= issue_date_from)
            if issue_date_to is not None:
                query = query.filter(Journal.issue_date <= issue_date_to)
            query = query.order_by(Journal.id).offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [JournalOut.model_validate(journal) for journal in query.all()]

    # Wallet transactions
    def create_wallet_txn(self, req: WalletTxnCreate) -> WalletTxnOut:
        if not req.company_id:
            raise ValidationError("Missing company_id")
        txn_date = _require_date(req.date, "date")
        if not req.walletable_type:
            raise ValidationError("Missing walletable_type")
        if req.walletable_type not in {t.value for t in WalletableType}:
            raise ValidationError(f"Invalid walletable_type: {req.walletable_type}")

        with self._write() as session:
            txn = WalletTxn(
                company_id=req.company_id,
                date=txn_date,
                amount=req.amount,
                balance=req.balance,
                entry_side=req.entry_side,
                walletable_type=req.walletable_type,
                walletable_id=req.walletable_id,
                description=req.description,
                status=matching.UNBOOKED,
            )
            session.add(txn)
            session.flush()
            return WalletTxnOut.model_validate(txn)

    def get_wallet_txn(self, wallet_txn_id: int) -> WalletTxnOut:
        with self._session() as session:
            txn = session.get(WalletTxn, wallet_txn_id)
            if txn is None:
                raise NotFoundError(not_found("Wallet transaction", wallet_txn_id))
            return WalletTxnOut.model_validate(txn)

    def list_wallet_txns(
        self, company_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[WalletTxnOut]:
        status = matching.normalize_status(status)
        with self._session() as session:
            query = session.query(WalletTxn)
            if company_id is not None:
                query = query.filter(WalletTxn.company_id == company_id)
            if status is not None:
                query = query.filter(WalletTxn.status == status)
            return [WalletTxnOut.model_validate(txn) for txn in query.order_by(WalletTxn.id)]

    def update_wallet_txn(self, wallet_txn_id: int, req: WalletTxnUpdate) -> WalletTxnOut:
        status = matching.normalize_status(req.status)
        if status is not None and status not in WALLET_TXN_STATUSES:
            raise ValidationError(f"Invalid status: {req.status}")
        with self._write() as session:
            txn = session.get(WalletTxn, wallet_txn_id)
            if txn is None:
                raise NotFoundError(not_found("Wallet transaction", wallet_txn_id))
            if status is not None:
                txn.status = status
            if req.deal_id is not None:
                txn.deal_id = req.deal_id
            if req.description is not None:
                txn.description = req.description
            txn.updated_at = utcnow()
            session.flush()
            return WalletTxnOut.model_validate(txn)

    def delete_wallet_txn(self, wallet_txn_id: int) -> None:
        with self._write() as session:
            txn = session.get(WalletTxn, wallet_txn_id)
            if txn is None:
                raise NotFoundError(not_found("Wallet transaction", wallet_txn_id))
            session.delete(txn)

    # Receipts
    def create_receipt(
        self,
        company_id: int,
        issue_date: str,
        description: str,
        file_name: str,
        content: bytes,
    ) -> ReceiptOut:
        """Store an uploaded receipt at ``<upload_dir>/<company_id>/<id>.pdf``."""
        if not company_id:
            raise ValidationError("Missing company_id")
        receipt_date = _require_date(issue_date, "issue_date")

        with self._write() as session:
            receipt = Receipt(
                company_id=company_id,
                issue_date=receipt_date,
                description=description or "",
                status="unconfirmed",
                file_name=file_name,
            )
            session.add(receipt)
            session.flush()

            path = self.upload_dir / str(company_id) / f"{receipt.id}.pdf"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            receipt.file_path = str(path)
            session.flush()
            return ReceiptOut.model_validate(receipt)

    def get_receipt(self, receipt_id: int) -> ReceiptOut:
        with self._session() as session:
            receipt = session.get(Receipt, receipt_id)
            if receipt is None:
                raise NotFoundError(not_found("Receipt", receipt_id))
            return ReceiptOut.model_validate(receipt)

    def list_receipts(self, company_id: Optional[int] = None) -> list[ReceiptOut]:
        with self._session() as session:
            query = session.query(Receipt)
            if company_id is not None:
                query = query.filter(Receipt.company_id == company_id)
            return [ReceiptOut.model_validate(r) for r in query.order_by(Receipt.id)]

    def delete_receipt(self, receipt_id: int) -> None:
        with self._write() as session:
            receipt = session.get(Receipt, receipt_id)
            if receipt is None:
                raise NotFoundError(not_found("Receipt", receipt_id))
            if receipt.file_path:
                Path(receipt.file_path).unlink(missing_ok=True)
            session.delete(receipt)

    # Tokens
    def issue_token(self, ttl: int, kind: str = "access", company_id: int = DEFAULT_COMPANY_ID) -> str:
        token = secrets.token_urlsafe(32)
        with self._write() as session:
            session.add(
                AccessToken(
                    token=token,
                    kind=kind,
                    company_id=company_id,
                    expires_at=utcnow() + timedelta(seconds=ttl),
                )
            )
        return token

    def validate_token(self, token: str) -> bool:
        with self._session() as session:
            row = session.get(AccessToken, token)
            return row is not None and row.kind == "access" and row.expires_at > utcnow()

    def revoke_token(self, token: str) -> None:
        with self._write() as session:
            row = session.get(AccessToken, token)
            if row is not None:
                session.delete(row)
