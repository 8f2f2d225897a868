"""Conversion of freee deals and journals into Beancount transactions.

Conversion is pure: problems such as unmapped account names are returned as
warnings on the ``ConversionResult`` instead of being logged here.
"""

import re
from typing import Optional, Union

from freee_beancount.domain.entities import (
    ConversionResult,
    Deal,
    DealType,
    EntryType,
    Journal,
    LedgerTransaction,
    Posting,
    WalletableType,
)
from freee_beancount.domain.mapper import STANDARD_TAX_CODE, AccountMapper, unmapped_account

DEFAULT_BANK_ACCOUNT = "Assets:Current:Bank:Ordinary"
DEFAULT_CREDIT_CARD_ACCOUNT = "Liabilities:Current:CreditCard"
AMOUNT_COLUMN = 60
VAT_COMMENT = "消費税"
INCOME_LABEL = "収入"
EXPENSE_LABEL = "支出"
JOURNAL_LABEL = "仕訳"


class BeancountConverter:
    """Turns freee transactions into balanced Beancount postings."""

    def __init__(
        self,
        mapper: AccountMapper,
        currency: str = "JPY",
        route_tax_by_code: bool = False,
        bank_account: str = DEFAULT_BANK_ACCOUNT,
        credit_card_account: str = DEFAULT_CREDIT_CARD_ACCOUNT,
    ):
        """Initialize converter.

        Args:
            mapper: Account mapper used to resolve freee account names
            currency: Commodity written on every posting
            route_tax_by_code: Resolve VAT accounts from each line's own tax code
                instead of always using the standard-rate account
            bank_account: Account for bank payments and balancing postings
            credit_card_account: Account for credit card payments
        """
        self.mapper = mapper
        self.currency = currency
        self.route_tax_by_code = route_tax_by_code
        self.bank_account = bank_account
        self.credit_card_account = credit_card_account

    def convert_deal(self, deal: Deal) -> ConversionResult:
        """Convert a deal into a ledger transaction."""
        warnings: list[str] = []
        postings: list[Posting] = []

        # Income lands on the credit side, expenses on the debit side
        multiplier = -1 if deal.type == DealType.INCOME else 1

        for detail in deal.details:
            postings.append(
                Posting(
                    account=self._resolve_account(detail.account_item_name, warnings),
                    amount=detail.amount * multiplier,
                    currency=self.currency,
                    comment=detail.description or None,
                )
            )
            if detail.vat > 0:
                tax_account = self._resolve_tax_account(detail.tax_code, warnings)
                if tax_account is not None:
                    postings.append(
                        Posting(
                            account=tax_account,
                            amount=detail.vat * multiplier,
                            currency=self.currency,
                            comment=VAT_COMMENT,
                        )
                    )

        if deal.payments:
            for payment in deal.payments:
                postings.append(
                    Posting(
                        account=self.wallet_account(payment.from_walletable_type),
                        amount=-payment.amount,
                        currency=self.currency,
                        comment=f"Payment from {payment.from_walletable_type}",
                    )
                )
        else:
            postings.append(
                Posting(
                    account=self.bank_account,
                    amount=deal.amount * -multiplier,
                    currency=self.currency,
                )
            )

        transaction = LedgerTransaction(
            date=deal.issue_date,
            narration=self._deal_narration(deal),
            postings=tuple(postings),
            payee=deal.partner_code or None,
            tags=(deal.ref_number,) if deal.ref_number else (),
        )
        return ConversionResult(transaction=transaction, warnings=tuple(warnings))

    def convert_journal(self, journal: Journal) -> ConversionResult:
        """Convert a manual journal into a ledger transaction."""
        warnings: list[str] = []
        postings: list[Posting] = []

        for detail in journal.details:
            sign = 1 if detail.entry_type == EntryType.DEBIT else -1
            postings.append(
                Posting(
                    account=self._resolve_account(detail.account_item_name, warnings),
                    amount=detail.amount * sign,
                    currency=self.currency,
                    comment=detail.description or None,
                )
            )
            if detail.vat > 0:
                tax_account = self._resolve_tax_account(detail.tax_code, warnings)
                if tax_account is not None:
                    postings.append(
                        Posting(
                            account=tax_account,
                            amount=detail.vat * sign,
                            currency=self.currency,
                            comment=VAT_COMMENT,
                        )
                    )

        narration = next((d.description for d in journal.details if d.description), JOURNAL_LABEL)
        transaction = LedgerTransaction(
            date=journal.issue_date,
            narration=narration,
            postings=tuple(postings),
        )
        return ConversionResult(transaction=transaction, warnings=tuple(warnings))

    def wallet_account(self, walletable_type: str) -> str:
        """Return the ledger account for a payment's wallet type."""
        if walletable_type == WalletableType.CREDIT_CARD.value:
            return self.credit_card_account
        return self.bank_account

    def _resolve_account(self, freee_name: str, warnings: list[str]) -> str:
        account = self.mapper.resolve(freee_name)
        if account is None:
            account = unmapped_account(freee_name)
            warnings.append(f"No mapping found for account: {freee_name}, using {account}")
        return account

    def _resolve_tax_account(self, tax_code: int, warnings: list[str]) -> Optional[str]:
        code: Union[str, int] = STANDARD_TAX_CODE
        if self.route_tax_by_code:
            if self.mapper.tax_code(tax_code) is not None:
                code = tax_code
            else:
                warnings.append(
                    f"No tax mapping for tax code {tax_code}, using {STANDARD_TAX_CODE}"
                )
        account = self.mapper.resolve_tax(code)
        if account is None:
            warnings.append(f"No tax account for tax code {code}, VAT posting skipped")
        return account

    def _deal_narration(self, deal: Deal) -> str:
        if len(deal.details) == 1 and deal.details[0].description:
            return deal.details[0].description
        label = INCOME_LABEL if deal.type == DealType.INCOME else EXPENSE_LABEL
        names = ", ".join(d.account_item_name for d in deal.details)
        return f"{label}: {names}"


def sanitize_tag(tag: str) -> str:
    """Replace characters Beancount does not allow in a tag with hyphens."""
    return re.sub(r"[^A-Za-z0-9\-_/.]+", "-", tag).strip("-")


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_amount(amount: int, currency: str) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):.0f} {currency}"


def format_transaction(txn: LedgerTransaction) -> str:
    """Render a transaction as Beancount text, one posting per line."""
    header = f"{txn.date.isoformat()} {txn.flag}"
    if txn.payee:
        header += f" {_quote(txn.payee)}"
    header += f" {_quote(txn.narration)}"
    tags = [sanitize_tag(tag) for tag in txn.tags]
    tags = [tag for tag in tags if tag]
    if tags:
        header += " " + " ".join(f"#{tag}" for tag in tags)

    lines = [header]
    for posting in txn.postings:
        padding = " " * max(1, AMOUNT_COLUMN - len(posting.account))
        line = f"  {posting.account}{padding}{format_amount(posting.amount, posting.currency)}"
        if posting.comment:
            line += f" ; {posting.comment}"
        lines.append(line)
    return "\n".join(lines) + "\n"
