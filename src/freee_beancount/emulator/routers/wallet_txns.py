from typing import Optional

from fastapi import APIRouter, Depends, Response

from freee_beancount.emulator.dependencies import get_store, parse_company_id
from freee_beancount.emulator.schemas import WalletTxnCreate, WalletTxnUpdate
from freee_beancount.emulator.store import EmulatorStore

router = APIRouter(prefix="/api/1/wallet_txns", tags=["wallet_txns"])


@router.get("")
def list_wallet_txns(
    company_id: Optional[str] = None,
    status: Optional[str] = None,
    store: EmulatorStore = Depends(get_store),
):
    # status accepts 1 (unbooked) and 2 (settled) as well as the names
    txns = store.list_wallet_txns(company_id=parse_company_id(company_id), status=status)
    return {"wallet_txns": txns}


@router.get("/{wallet_txn_id}")
def get_wallet_txn(wallet_txn_id: int, store: EmulatorStore = Depends(get_store)):
    return {"wallet_txn": store.get_wallet_txn(wallet_txn_id)}


@router.post("", status_code=201)
def create_wallet_txn(payload: WalletTxnCreate, store: EmulatorStore = Depends(get_store)):
    return {"wallet_txn": store.create_wallet_txn(payload)}


@router.put("/{wallet_txn_id}")
def update_wallet_txn(
    wallet_txn_id: int, payload: WalletTxnUpdate, store: EmulatorStore = Depends(get_store)
):
    return {"wallet_txn": store.update_wallet_txn(wallet_txn_id, payload)}


@router.delete("/{wallet_txn_id}", status_code=204)
def delete_wallet_txn(wallet_txn_id: int, store: EmulatorStore = Depends(get_store)):
    store.delete_wallet_txn(wallet_txn_id)
    return Response(status_code=204)
