"""Request-scoped accessors for emulator state."""

from typing import Optional

from fastapi import Request

from freee_beancount.domain.errors import ValidationError
from freee_beancount.emulator.config import EmulatorSettings
from freee_beancount.emulator.store import EmulatorStore
from freee_beancount.utils.date_parser import parse_iso_date


def get_store(request: Request) -> EmulatorStore:
    return request.app.state.store


def get_settings(request: Request) -> EmulatorSettings:
    return request.app.state.settings


def parse_company_id(value: Optional[str], required: bool = False) -> Optional[int]:
    """Parse a company_id query value the way the API reports problems with it."""
    if value is None or value == "":
        if required:
            raise ValidationError("company_id is required")
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError("Invalid company_id")


def parse_date_filter(value: Optional[str]):
    return parse_iso_date(value) if value else None
