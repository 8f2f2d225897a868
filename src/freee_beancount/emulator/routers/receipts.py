from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from freee_beancount.domain.errors import ValidationError
from freee_beancount.emulator.dependencies import get_store, parse_company_id
from freee_beancount.emulator.store import EmulatorStore

router = APIRouter(prefix="/api/1/receipts", tags=["receipts"])


@router.get("")
def list_receipts(company_id: Optional[str] = None, store: EmulatorStore = Depends(get_store)):
    return {"receipts": store.list_receipts(company_id=parse_company_id(company_id))}


@router.post("", status_code=201)
async def create_receipt(
    company_id: Optional[str] = Form(None),
    issue_date: Optional[str] = Form(None),
    description: str = Form(""),
    receipt: Optional[UploadFile] = File(None),
    store: EmulatorStore = Depends(get_store),
):
    parsed_company_id = parse_company_id(company_id, required=True)
    if not issue_date:
        raise ValidationError("Missing issue_date")
    if receipt is None:
        raise ValidationError("Missing receipt file")
    content = await receipt.read()
    created = store.create_receipt(
        company_id=parsed_company_id,
        issue_date=issue_date,
        description=description,
        file_name=receipt.filename or "receipt.pdf",
        content=content,
    )
    return {"receipt": created}


@router.get("/{receipt_id}")
def get_receipt(receipt_id: int, store: EmulatorStore = Depends(get_store)):
    return {"receipt": store.get_receipt(receipt_id)}


@router.delete("/{receipt_id}", status_code=204)
def delete_receipt(receipt_id: int, store: EmulatorStore = Depends(get_store)):
    store.delete_receipt(receipt_id)
    return Response(status_code=204)
