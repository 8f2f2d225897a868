from typing import Optional

from fastapi import APIRouter, Depends, Query

from freee_beancount.emulator.dependencies import get_store, parse_company_id, parse_date_filter
from freee_beancount.emulator.schemas import JournalCreate
from freee_beancount.emulator.store import EmulatorStore

router = APIRouter(prefix="/api/1/journals", tags=["journals"])


@router.get("")
def list_journals(
    company_id: Optional[str] = None,
    issue_date_from: Optional[str] = None,
    issue_date_to: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: EmulatorStore = Depends(get_store),
):
    journals = store.list_journals(
        company_id=parse_company_id(company_id),
        issue_date_from=parse_date_filter(issue_date_from),
        issue_date_to=parse_date_filter(issue_date_to),
        limit=limit,
        offset=offset,
    )
    return {"journals": journals}


@router.get("/{journal_id}")
def get_journal(journal_id: int, store: EmulatorStore = Depends(get_store)):
    return {"journal": store.get_journal(journal_id)}


@router.post("", status_code=201)
def create_journal(payload: JournalCreate, store: EmulatorStore = Depends(get_store)):
    return {"journal": store.create_journal(payload)}
