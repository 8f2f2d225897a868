"""Matching engine linking wallet transactions to deals.

A wallet transaction is linked at most once: the link is a conditional update
that only succeeds while the row is still ``unbooked``.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from freee_beancount.emulator.models import WalletTxn, utcnow
from freee_beancount.emulator.schemas import PaymentIn
from freee_beancount.utils.date_parser import parse_iso_date

logger = logging.getLogger(__name__)

UNBOOKED = "unbooked"
SETTLED = "settled"
PASSED = "passed"

# freee encodes the wallet_txns status filter numerically
STATUS_ALIASES = {"1": UNBOOKED, "2": SETTLED}


def normalize_status(status: Optional[str]) -> Optional[str]:
    if status is None or status == "":
        return None
    return STATUS_ALIASES.get(status, status)


def find_auto_match_candidates(
    session: Session, company_id: int, issue_date: date, amount: int, entry_side: str
) -> list[WalletTxn]:
    """Unbooked wallet txns of the company on the deal's date for its total, oldest first."""
    return (
        session.query(WalletTxn)
        .filter(
            WalletTxn.company_id == company_id,
            WalletTxn.status == UNBOOKED,
            WalletTxn.date == issue_date,
            WalletTxn.entry_side == entry_side,
            func.abs(WalletTxn.amount) == abs(amount),
        )
        .order_by(WalletTxn.id)
        .all()
    )


def find_payment_candidates(
    session: Session, company_id: int, payment: PaymentIn
) -> list[WalletTxn]:
    """Unbooked wallet txns matching a payment's wallet, date and amount exactly."""
    return (
        session.query(WalletTxn)
        .filter(
            WalletTxn.company_id == company_id,
            WalletTxn.status == UNBOOKED,
            WalletTxn.walletable_type == payment.from_walletable_type,
            WalletTxn.walletable_id == payment.from_walletable_id,
            WalletTxn.date == parse_iso_date(payment.date),
            func.abs(WalletTxn.amount) == abs(payment.amount),
        )
        .order_by(WalletTxn.id)
        .all()
    )


def link_wallet_txn(session: Session, wallet_txn_id: int, deal_id: int) -> bool:
    """Settle a wallet txn against a deal. Returns False if it was no longer unbooked."""
    result = session.execute(
        update(WalletTxn)
        .where(WalletTxn.id == wallet_txn_id, WalletTxn.status == UNBOOKED)
        .values(status=SETTLED, deal_id=deal_id, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


def _link_first(session: Session, candidates: list[WalletTxn], deal_id: int) -> Optional[int]:
    for candidate in candidates:
        if link_wallet_txn(session, candidate.id, deal_id):
            return candidate.id
    return None


def auto_link(
    session: Session, deal_id: int, company_id: int, issue_date: date, amount: int, deal_type: str
) -> Optional[int]:
    """Link the first matching unbooked wallet txn to a deal created without payments.

    The lowest-id candidate wins when several match. Returns the linked wallet
    txn id, or None when nothing matched.
    """
    candidates = find_auto_match_candidates(session, company_id, issue_date, amount, deal_type)
    if len(candidates) > 1:
        logger.debug(
            f"Deal {deal_id} matches {len(candidates)} wallet txns, linking the first"
        )
    return _link_first(session, candidates, deal_id)


def link_payments(
    session: Session, deal_id: int, company_id: int, payments: list[PaymentIn]
) -> list[PaymentIn]:
    """Link each explicit payment to its wallet txn. Returns payments that found none."""
    unmatched = []
    for payment in payments:
        candidates = find_payment_candidates(session, company_id, payment)
        if _link_first(session, candidates, deal_id) is None:
            unmatched.append(payment)
    return unmatched
