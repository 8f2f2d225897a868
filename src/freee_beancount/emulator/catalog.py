"""Static reference data served by the emulator."""

from typing import Optional

from pydantic import BaseModel


class Company(BaseModel):
    id: int
    display_name: str
    name: str
    name_kana: str


class AccountItem(BaseModel):
    id: int
    name: str
    account_category: str
    default_tax_code: int = 0


class Walletable(BaseModel):
    id: int
    name: str
    type: str
    bank_id: Optional[int] = None
    last_balance: int = 0
    walletable_balance: int = 0


COMPANIES = [
    Company(
        id=1,
        display_name="Pigeonworks LLC",
        name="合同会社Pigeonworks",
        name_kana="ゴウドウガイシャピジョンワークス",
    ),
]

ACCOUNT_ITEMS = [
    AccountItem(id=101, name="現金", account_category="asset"),
    AccountItem(id=102, name="普通預金", account_category="asset"),
    AccountItem(id=103, name="売掛金", account_category="asset"),
    AccountItem(id=201, name="買掛金", account_category="liability"),
    AccountItem(id=202, name="未払金", account_category="liability"),
    AccountItem(id=203, name="クレジットカード", account_category="liability"),
    AccountItem(id=401, name="売上高", account_category="income", default_tax_code=21),
    AccountItem(id=501, name="仕入高", account_category="expense", default_tax_code=136),
    AccountItem(id=502, name="新聞図書費", account_category="expense", default_tax_code=136),
    AccountItem(id=503, name="研修費", account_category="expense", default_tax_code=136),
    AccountItem(id=504, name="消耗品費", account_category="expense", default_tax_code=136),
    AccountItem(id=505, name="通信費", account_category="expense", default_tax_code=136),
    AccountItem(id=506, name="支払手数料", account_category="expense", default_tax_code=136),
    AccountItem(id=507, name="旅費交通費", account_category="expense", default_tax_code=136),
    AccountItem(id=508, name="接待交際費", account_category="expense", default_tax_code=136),
    AccountItem(id=509, name="雑費", account_category="expense", default_tax_code=136),
    AccountItem(id=510, name="広告宣伝費", account_category="expense", default_tax_code=136),
    AccountItem(id=511, name="地代家賃", account_category="expense", default_tax_code=136),
    AccountItem(id=512, name="水道光熱費", account_category="expense", default_tax_code=136),
    AccountItem(id=513, name="保険料", account_category="expense", default_tax_code=136),
    AccountItem(id=514, name="研究開発費", account_category="expense", default_tax_code=136),
]

WALLETABLES = [
    Walletable(
        id=1,
        name="GMOあおぞらネット銀行",
        type="bank_account",
        bank_id=1,
        last_balance=1000000,
        walletable_balance=1000000,
    ),
    Walletable(
        id=2,
        name="アメリカン・エキスプレス",
        type="credit_card",
        last_balance=-50000,
        walletable_balance=-50000,
    ),
    Walletable(
        id=3,
        name="三井住友カード",
        type="credit_card",
        last_balance=-30000,
        walletable_balance=-30000,
    ),
    Walletable(id=4, name="現金", type="wallet", last_balance=50000, walletable_balance=50000),
]

_ACCOUNT_ITEMS_BY_ID = {item.id: item for item in ACCOUNT_ITEMS}


def account_item_name(account_item_id: int) -> str:
    """Return the catalog name of an account item, or a placeholder for unknown IDs."""
    item = _ACCOUNT_ITEMS_BY_ID.get(account_item_id)
    return item.name if item else f"Account Item {account_item_id}"


def walletables_of_type(walletable_type: Optional[str] = None) -> list[Walletable]:
    if walletable_type is None:
        return list(WALLETABLES)
    return [w for w in WALLETABLES if w.type == walletable_type]
