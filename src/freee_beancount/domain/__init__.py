"""Domain layer for freee_beancount."""

from freee_beancount.domain.converter import BeancountConverter, format_transaction
from freee_beancount.domain.mapper import AccountMapper

__all__ = ["AccountMapper", "BeancountConverter", "format_transaction"]
