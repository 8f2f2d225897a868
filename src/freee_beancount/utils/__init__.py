"""Utility functions for freee_beancount."""

from freee_beancount.utils.date_parser import (
    get_date_range,
    parse_date,
    parse_iso_date,
    parse_month_key,
    year_month,
)

__all__ = ["parse_date", "parse_iso_date", "parse_month_key", "year_month", "get_date_range"]
