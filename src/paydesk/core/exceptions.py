"""Paydesk exception hierarchy."""

from __future__ import annotations


class PaydeskError(Exception):
    """Base exception for all Paydesk errors."""


class ImportAbortedError(PaydeskError):
    """The uploaded grid is structurally unusable; no row was processed."""

    def __init__(self, reason: str, company_id: str = "") -> None:
        self.reason = reason
        self.company_id = company_id
        super().__init__(f"Import aborted: {reason}")


class TemplateError(PaydeskError):
    """Invalid edit to a column template."""


class DuplicateKeyError(TemplateError):
    """A column key already exists in the template."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Column key {key!r} already exists in template")


class ProtectedFieldError(TemplateError):
    """Attempt to remove a required system column."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Column {key!r} is a required system field and cannot be removed")


class UnknownColumnError(TemplateError):
    """Referenced column key is not part of the template."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Column {key!r} not found in template")


class DirectoryError(PaydeskError):
    """Employee directory or benefit source lookup failed."""


class PersistenceError(PaydeskError):
    """A write to the employee or payrun store failed."""


class PayrunPeriodExistsError(PersistenceError):
    """Payrun data already exists for the requested month and year."""

    def __init__(self, company_id: str, month: str, year: int) -> None:
        self.company_id = company_id
        self.month = month
        self.year = year
        super().__init__(f"Data already exists for {month} {year}")


class CacheError(PaydeskError):
    """Redis cache operation failed."""
