"""Request and response bodies of the emulator API."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorBody(BaseModel):
    error: str
    error_description: Optional[str] = None


# Requests. Required fields are optional here so that missing values are
# reported as 400 invalid_parameter like the real API instead of 422.


class DetailIn(BaseModel):
    account_item_id: int = 0
    tax_code: int = 0
    amount: int = 0
    description: Optional[str] = None
    item_id: Optional[int] = None
    section_id: Optional[int] = None


class PaymentIn(BaseModel):
    date: str
    from_walletable_type: str
    from_walletable_id: int
    amount: int


class DealCreate(BaseModel):
    company_id: int = 0
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    type: Optional[str] = None
    details: List[DetailIn] = Field(default_factory=list)
    payments: List[PaymentIn] = Field(default_factory=list)
    ref_number: Optional[str] = None
    partner_id: Optional[int] = None
    partner_code: Optional[str] = None


class DealUpdate(BaseModel):
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    details: List[DetailIn] = Field(default_factory=list)
    ref_number: Optional[str] = None
    partner_id: Optional[int] = None


class JournalDetailIn(BaseModel):
    entry_type: str
    account_item_id: int = 0
    tax_code: int = 0
    partner_id: Optional[int] = None
    amount: int = 0
    vat: int = 0
    description: Optional[str] = None


class JournalCreate(BaseModel):
    company_id: int = 0
    issue_date: Optional[str] = None
    details: List[JournalDetailIn] = Field(default_factory=list)


class WalletTxnCreate(BaseModel):
    company_id: int = 0
    date: Optional[str] = None
    amount: int = 0
    entry_side: str = "expense"
    walletable_type: Optional[str] = None
    walletable_id: int = 0
    description: str = ""
    balance: Optional[int] = None


class WalletTxnUpdate(BaseModel):
    status: Optional[str] = None
    deal_id: Optional[int] = None
    description: Optional[str] = None


# Responses


class DetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_item_id: int
    account_item_name: str
    tax_code: int
    amount: int
    vat: int
    description: Optional[str] = None
    item_id: Optional[int] = None
    section_id: Optional[int] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    amount: int
    from_walletable_type: str
    from_walletable_id: int


class DealOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    issue_date: date
    due_date: Optional[date] = None
    type: str
    details: List[DetailOut]
    payments: List[PaymentOut] = Field(default_factory=list)
    amount: int
    due_amount: Optional[int] = None
    ref_number: Optional[str] = None
    partner_id: Optional[int] = None
    partner_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JournalDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_type: str
    account_item_id: int
    account_item_name: str
    tax_code: int
    partner_id: Optional[int] = None
    amount: int
    vat: int
    description: Optional[str] = None


class JournalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    issue_date: date
    details: List[JournalDetailOut]
    created_at: datetime
    updated_at: datetime


class WalletTxnOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    date: date
    amount: int
    balance: Optional[int] = None
    entry_side: str
    walletable_type: str
    walletable_id: int
    description: str
    status: str
    deal_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ReceiptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    issue_date: date
    description: str
    status: str
    file_name: str
    file_path: str
    created_at: datetime
    updated_at: datetime


class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    company_id: int
