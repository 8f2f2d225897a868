import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from freee_beancount.emulator.dependencies import get_store, parse_company_id, parse_date_filter
from freee_beancount.emulator.schemas import DealCreate, DealUpdate
from freee_beancount.emulator.store import EmulatorStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/1/deals", tags=["deals"])


@router.get("")
def list_deals(
    company_id: Optional[str] = None,
    issue_date_from: Optional[str] = None,
    issue_date_to: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: EmulatorStore = Depends(get_store),
):
    deals = store.list_deals(
        company_id=parse_company_id(company_id),
        issue_date_from=parse_date_filter(issue_date_from),
        issue_date_to=parse_date_filter(issue_date_to),
        limit=limit,
        offset=offset,
    )
    return {"deals": deals}


@router.get("/{deal_id}")
def get_deal(deal_id: int, store: EmulatorStore = Depends(get_store)):
    return {"deal": store.get_deal(deal_id)}


@router.post("", status_code=201)
def create_deal(payload: DealCreate, store: EmulatorStore = Depends(get_store)):
    deal, unmatched = store.create_deal(payload)
    for payment in unmatched:
        logger.warning(
            f"Deal {deal.id}: no unbooked wallet txn for payment "
            f"{payment.from_walletable_type}/{payment.from_walletable_id} "
            f"{payment.date} {payment.amount}"
        )
    return {"deal": deal}


@router.put("/{deal_id}")
def update_deal(deal_id: int, payload: DealUpdate, store: EmulatorStore = Depends(get_store)):
    return {"deal": store.update_deal(deal_id, payload)}


@router.delete("/{deal_id}", status_code=204)
def delete_deal(deal_id: int, store: EmulatorStore = Depends(get_store)):
    store.delete_deal(deal_id)
    return Response(status_code=204)
