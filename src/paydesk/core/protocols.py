"""Protocol interfaces for the collaborators the import pipeline talks to.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from paydesk.models.employee import Benefit, EmployeeRecord
from paydesk.models.payrun import PayrunResult
from paydesk.models.template import ImportDomain, TemplateColumn


# ---------------------------------------------------------------------------
# Employee Directory
# ---------------------------------------------------------------------------

@runtime_checkable
class IEmployeeDirectory(Protocol):
    """Company-scoped employee records, read-mostly during an import."""

    def lookup_by_business_id(self, company_id: str, employee_id: str) -> EmployeeRecord | None: ...

    def list(self, company_id: str) -> list[EmployeeRecord]: ...

    def add(self, company_id: str, employee: EmployeeRecord) -> EmployeeRecord: ...


# ---------------------------------------------------------------------------
# Template Persistence
# ---------------------------------------------------------------------------

@runtime_checkable
class ITemplateStore(Protocol):
    """Per-company column template configuration."""

    def load(self, company_id: str, domain: ImportDomain) -> list[TemplateColumn] | None: ...

    def save(self, company_id: str, domain: ImportDomain, columns: list[TemplateColumn]) -> None: ...


# ---------------------------------------------------------------------------
# Payrun Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IPayrunStore(Protocol):
    """Calculated payruns, one per employee per month+year."""

    def save(self, company_id: str, result: PayrunResult) -> None: ...

    def list_period(self, company_id: str, month: str, year: int) -> list[PayrunResult]: ...

    def has_period(self, company_id: str, month: str, year: int) -> bool: ...

    def clear_period(self, company_id: str, month: str, year: int) -> int: ...


# ---------------------------------------------------------------------------
# Benefits
# ---------------------------------------------------------------------------

@runtime_checkable
class IBenefitSource(Protocol):
    """Company benefit catalogue."""

    def list(self, company_id: str) -> list[Benefit]: ...


# ---------------------------------------------------------------------------
# Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...
