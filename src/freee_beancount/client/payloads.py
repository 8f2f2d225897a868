"""Decoding of remote API JSON payloads into domain entities."""

from typing import Any, Callable, Optional, TypeVar

from freee_beancount.domain.entities import (
    Deal,
    DealType,
    Detail,
    EntryType,
    Journal,
    JournalDetail,
    Payment,
)
from freee_beancount.domain.errors import DomainError, RemoteAPIError
from freee_beancount.utils.date_parser import parse_iso_date

T = TypeVar("T")


def _decode(kind: str, build: Callable[[dict[str, Any]], T], payload: Any) -> T:
    try:
        return build(payload)
    except DomainError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise RemoteAPIError(f"freee API error: malformed {kind} payload ({e!r})") from e


def _optional_date(value: Optional[str]):
    return parse_iso_date(value) if value else None


def detail_from_payload(payload: dict[str, Any]) -> Detail:
    return Detail(
        id=payload.get("id"),
        account_item_id=payload.get("account_item_id"),
        account_item_name=payload.get("account_item_name", ""),
        tax_code=int(payload.get("tax_code") or 0),
        amount=int(payload.get("amount") or 0),
        vat=int(payload.get("vat") or 0),
        description=payload.get("description"),
    )


def payment_from_payload(payload: dict[str, Any]) -> Payment:
    return Payment(
        id=payload.get("id"),
        date=parse_iso_date(payload["date"]),
        amount=int(payload.get("amount") or 0),
        from_walletable_type=payload.get("from_walletable_type", ""),
        from_walletable_id=int(payload.get("from_walletable_id") or 0),
    )


def deal_from_payload(payload: dict[str, Any]) -> Deal:
    """Build a Deal from one element of a ``deals`` response.

    Raises:
        InvalidDateError: If issue_date or a payment date is not YYYY-MM-DD
        RemoteAPIError: If a required field is missing or has the wrong type
    """
    return _decode("deal", _build_deal, payload)


def _build_deal(payload: dict[str, Any]) -> Deal:
    return Deal(
        id=int(payload["id"]),
        company_id=int(payload.get("company_id") or 0),
        issue_date=parse_iso_date(payload["issue_date"]),
        type=DealType(payload["type"]),
        details=tuple(detail_from_payload(d) for d in payload.get("details") or []),
        payments=tuple(payment_from_payload(p) for p in payload.get("payments") or []),
        amount=int(payload.get("amount") or 0),
        due_date=_optional_date(payload.get("due_date")),
        due_amount=payload.get("due_amount"),
        ref_number=payload.get("ref_number"),
        partner_id=payload.get("partner_id"),
        partner_code=payload.get("partner_code"),
    )


def journal_detail_from_payload(payload: dict[str, Any]) -> JournalDetail:
    return JournalDetail(
        id=payload.get("id"),
        entry_type=EntryType(payload["entry_type"]),
        account_item_id=payload.get("account_item_id"),
        account_item_name=payload.get("account_item_name", ""),
        tax_code=int(payload.get("tax_code") or 0),
        amount=int(payload.get("amount") or 0),
        vat=int(payload.get("vat") or 0),
        description=payload.get("description"),
    )


def journal_from_payload(payload: dict[str, Any]) -> Journal:
    """Build a Journal from one element of a ``journals`` response."""
    return _decode("journal", _build_journal, payload)


def _build_journal(payload: dict[str, Any]) -> Journal:
    return Journal(
        id=int(payload["id"]),
        company_id=int(payload.get("company_id") or 0),
        issue_date=parse_iso_date(payload["issue_date"]),
        details=tuple(journal_detail_from_payload(d) for d in payload.get("details") or []),
    )
