"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(DomainError):
    """A required setting is missing or invalid."""


class InvalidDateError(ValidationError):
    """A date or month key could not be parsed."""


class DuplicateSyncError(ConflictError):
    """A sync record with the same type and remote ID already exists."""


class LedgerIOError(DomainError):
    """A ledger month file could not be created or appended to."""


class HistoryWriteError(DomainError):
    """The sync history database rejected a write."""


class RemoteAPIError(DomainError):
    """The remote accounting API answered with a failure."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description
        self.offset = offset


def missing_settings(names: list[str]) -> str:
    """Return message for missing configuration values."""
    return f"Missing required configuration: {', '.join(names)}"


def duplicate_sync(sync_type: str, freee_id: int) -> str:
    """Return message for an already recorded sync."""
    return f"{sync_type} {freee_id} has already been synced"


def history_write_failed(sync_type: str, freee_id: int, reason: object) -> str:
    """Return message for a sync record that could not be stored."""
    return f"Could not record {sync_type} {freee_id} in sync history: {reason}"


def invalid_date(value: str) -> str:
    """Return message for an unparseable ISO date."""
    return f"Invalid date '{value}': expected YYYY-MM-DD"


def invalid_month_key(value: str) -> str:
    """Return message for an unparseable month key."""
    return f"Invalid year-month '{value}': expected YYYY-MM"


def api_error_message(
    status_code: Optional[int], error: Optional[str], error_description: Optional[str]
) -> str:
    """Return message for a remote API error response."""
    if error is None:
        return f"freee API error (status {status_code})"
    if error_description:
        return f"freee API error: {error} - {error_description}"
    return f"freee API error: {error}"


class NotFoundError(DomainError):
    """A requested record does not exist."""


def not_found(kind: str, record_id: int) -> str:
    """Return message for a missing record."""
    return f"{kind} {record_id} not found"
