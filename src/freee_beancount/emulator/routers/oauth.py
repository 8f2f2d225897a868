from typing import Optional

from fastapi import APIRouter, Depends, Form

from freee_beancount.emulator.auth import error_response
from freee_beancount.emulator.config import EmulatorSettings
from freee_beancount.emulator.dependencies import get_settings, get_store
from freee_beancount.emulator.schemas import TokenOut
from freee_beancount.emulator.store import DEFAULT_COMPANY_ID, EmulatorStore

router = APIRouter(prefix="/oauth", tags=["oauth"])


@router.post("/token")
def issue_token(
    grant_type: Optional[str] = Form(None),
    client_id: Optional[str] = Form(None),
    client_secret: Optional[str] = Form(None),
    store: EmulatorStore = Depends(get_store),
    settings: EmulatorSettings = Depends(get_settings),
):
    """Issue a token for any grant; credentials are not checked."""
    if not grant_type:
        return error_response(400, "invalid_request", "Missing grant_type")
    return TokenOut(
        access_token=store.issue_token(settings.token_ttl),
        refresh_token=store.issue_token(settings.token_ttl, kind="refresh"),
        token_type="Bearer",
        expires_in=settings.token_ttl,
        company_id=DEFAULT_COMPANY_ID,
    )
