"""Account mapper: freee account item names to Beancount account names."""

import re
from pathlib import Path
from typing import Optional, Union

import pydantic
import yaml
from pydantic import BaseModel, Field

from freee_beancount.domain.errors import ConfigurationError

UNMAPPED_PREFIX = "Expenses:Unmapped"
STANDARD_TAX_CODE = "tax_10"


class AccountMapping(BaseModel):
    freee: str
    beancount: str
    type: Optional[str] = None


class TaxCodeMapping(BaseModel):
    code: str
    rate: float = 0.0
    description: Optional[str] = None
    beancount_account: Optional[str] = None
    # numeric freee tax codes that route to this entry
    freee_codes: list[int] = Field(default_factory=list)


class AssetMappings(BaseModel):
    current: list[AccountMapping] = Field(default_factory=list)
    fixed: list[AccountMapping] = Field(default_factory=list)


class LiabilityMappings(BaseModel):
    current: list[AccountMapping] = Field(default_factory=list)
    longterm: list[AccountMapping] = Field(default_factory=list)


class ExpenseMappings(BaseModel):
    cogs: list[AccountMapping] = Field(default_factory=list)
    sga: list[AccountMapping] = Field(default_factory=list)
    nonoperating: list[AccountMapping] = Field(default_factory=list)


class AccountMappingDoc(BaseModel):
    """Structure of the account mapping YAML file."""

    assets: AssetMappings = Field(default_factory=AssetMappings)
    liabilities: LiabilityMappings = Field(default_factory=LiabilityMappings)
    equity: list[AccountMapping] = Field(default_factory=list)
    income: list[AccountMapping] = Field(default_factory=list)
    expenses: ExpenseMappings = Field(default_factory=ExpenseMappings)
    tax_codes: list[TaxCodeMapping] = Field(default_factory=list)

    def account_mappings(self) -> list[AccountMapping]:
        return [
            *self.assets.current,
            *self.assets.fixed,
            *self.liabilities.current,
            *self.liabilities.longterm,
            *self.equity,
            *self.income,
            *self.expenses.cogs,
            *self.expenses.sga,
            *self.expenses.nonoperating,
        ]


def sanitize_account_component(name: str) -> str:
    """Strip whitespace so the name is a single Beancount account token."""
    return re.sub(r"\s+", "", name)


def unmapped_account(name: str) -> str:
    """Return the placeholder account for a freee name with no mapping."""
    return f"{UNMAPPED_PREFIX}:{sanitize_account_component(name)}"


class AccountMapper:
    """Resolves freee account item names and tax codes to Beancount accounts."""

    def __init__(self, doc: AccountMappingDoc):
        self.doc = doc
        self._accounts: dict[str, str] = {}
        self._tax_codes: dict[str, TaxCodeMapping] = {}
        self._freee_tax_codes: dict[int, TaxCodeMapping] = {}

        for mapping in doc.account_mappings():
            self._accounts[mapping.freee] = mapping.beancount
        for tax_code in doc.tax_codes:
            self._tax_codes[tax_code.code] = tax_code
            for freee_code in tax_code.freee_codes:
                self._freee_tax_codes[freee_code] = tax_code

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AccountMapper":
        """Load the mapping table from a YAML file.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        mapping_path = Path(path)
        if not mapping_path.exists():
            raise ConfigurationError(f"Account mapping file not found: {mapping_path}")
        with mapping_path.open("rt", encoding="utf-8") as fo:
            try:
                payload = yaml.safe_load(fo) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid account mapping file {mapping_path}: {e}")
        try:
            doc = AccountMappingDoc.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ConfigurationError(f"Invalid account mapping file {mapping_path}: {e}")
        return cls(doc)

    def resolve(self, freee_name: str) -> Optional[str]:
        """Return the Beancount account for a freee account name, if mapped."""
        return self._accounts.get(freee_name)

    def resolve_with_fallback(self, freee_name: str, fallback: str) -> str:
        return self._accounts.get(freee_name) or fallback

    def has_mapping(self, freee_name: str) -> bool:
        return freee_name in self._accounts

    def all_mappings(self) -> list[tuple[str, str]]:
        return list(self._accounts.items())

    def tax_code(self, code: Union[str, int]) -> Optional[TaxCodeMapping]:
        """Look up a tax code entry by its key (``tax_10``) or numeric freee code."""
        if isinstance(code, int):
            return self._freee_tax_codes.get(code)
        return self._tax_codes.get(code)

    def tax_rate(self, code: Union[str, int]) -> float:
        mapping = self.tax_code(code)
        return mapping.rate if mapping else 0.0

    def resolve_tax(self, code: Union[str, int]) -> Optional[str]:
        """Return the tax account for a tax code, or None if exempt or unknown."""
        mapping = self.tax_code(code)
        if mapping is None:
            return None
        return mapping.beancount_account or None
