from typing import Optional

from fastapi import APIRouter

from freee_beancount.emulator.catalog import ACCOUNT_ITEMS, COMPANIES, walletables_of_type
from freee_beancount.emulator.dependencies import parse_company_id

router = APIRouter(prefix="/api/1", tags=["reference"])


@router.get("/companies")
def list_companies():
    return {"companies": COMPANIES}


@router.get("/account_items")
def list_account_items(company_id: Optional[str] = None):
    parse_company_id(company_id, required=True)
    return {"account_items": ACCOUNT_ITEMS}


@router.get("/walletables")
def list_walletables(company_id: Optional[str] = None, type: Optional[str] = None):
    parse_company_id(company_id, required=True)
    return {"walletables": walletables_of_type(type)}
