"""Tests for the account mapper."""

import pytest

from freee_beancount.domain.errors import ConfigurationError
from freee_beancount.domain.mapper import (
    AccountMapper,
    AccountMappingDoc,
    STANDARD_TAX_CODE,
    unmapped_account,
)


class TestAccountMapper:
    """Tests for resolving freee names against the mapping file."""

    def test_resolve_mapped_names(self, mapper):
        assert mapper.resolve("普通預金") == "Assets:Current:Bank:Ordinary"
        assert mapper.resolve("売上高") == "Income:Sales"
        assert mapper.resolve("消耗品費") == "Expenses:SGA:Supplies"
        assert mapper.has_mapping("クレジットカード")

    def test_resolve_unknown_name_returns_none(self, mapper):
        assert mapper.resolve("未知の科目") is None
        assert not mapper.has_mapping("未知の科目")

    def test_resolve_with_fallback(self, mapper):
        assert mapper.resolve_with_fallback("未知の科目", "Expenses:Other") == "Expenses:Other"
        assert mapper.resolve_with_fallback("現金", "Expenses:Other") == "Assets:Current:Cash"

    def test_all_mappings_covers_every_category(self, mapper):
        accounts = {beancount for _, beancount in mapper.all_mappings()}
        assert "Equity:Capital" in accounts
        assert "Liabilities:Current:AccountsPayable" in accounts
        assert "Expenses:COGS:Purchases" in accounts

    def test_resolve_tax_by_key_and_freee_code(self, mapper):
        assert mapper.resolve_tax(STANDARD_TAX_CODE) == "Assets:Current:ConsumptionTax"
        assert mapper.resolve_tax(136) == "Assets:Current:ConsumptionTax"
        assert mapper.resolve_tax("tax_8_reduced") == "Assets:Current:ConsumptionTax:Reduced"
        assert mapper.tax_rate("tax_10") == pytest.approx(0.10)

    def test_exempt_and_unknown_tax_codes_have_no_account(self, mapper):
        assert mapper.resolve_tax("exempt") is None
        assert mapper.resolve_tax(0) is None
        assert mapper.resolve_tax("tax_99") is None
        assert mapper.tax_rate("tax_99") == 0.0


class TestUnmappedAccount:
    def test_placeholder_keeps_japanese_name(self):
        assert unmapped_account("未知の科目") == "Expenses:Unmapped:未知の科目"

    def test_placeholder_strips_whitespace(self):
        assert unmapped_account("Office  Supplies\t2") == "Expenses:Unmapped:OfficeSupplies2"


class TestMappingFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            AccountMapper.from_file(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("assets: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid account mapping file"):
            AccountMapper.from_file(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "shape.yaml"
        path.write_text("income:\n  - freee: 売上高\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            AccountMapper.from_file(path)

    def test_empty_file_gives_empty_mapper(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        mapper = AccountMapper.from_file(path)
        assert mapper.all_mappings() == []

    def test_from_document(self):
        doc = AccountMappingDoc.model_validate(
            {"income": [{"freee": "雑収入", "beancount": "Income:Misc"}]}
        )
        assert AccountMapper(doc).resolve("雑収入") == "Income:Misc"
