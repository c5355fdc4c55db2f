"""In-memory backends for unit tests and local runs: dict-backed fakes."""

from __future__ import annotations

import uuid
from typing import Iterable

from paydesk.core.exceptions import PersistenceError
from paydesk.models.employee import Benefit, EmployeeRecord
from paydesk.models.payrun import PayrunResult
from paydesk.models.template import ImportDomain, TemplateColumn
from paydesk.payrun.calculator import month_name


class MemoryTemplateStore:
    """Dict-backed ITemplateStore."""

    def __init__(self) -> None:
        self._templates: dict[str, list[TemplateColumn]] = {}

    def load(self, company_id: str, domain: ImportDomain) -> list[TemplateColumn] | None:
        columns = self._templates.get(f"{company_id}:{domain}")
        return [c.model_copy() for c in columns] if columns is not None else None

    def save(self, company_id: str, domain: ImportDomain, columns: list[TemplateColumn]) -> None:
        self._templates[f"{company_id}:{domain}"] = [c.model_copy() for c in columns]


class MemoryEmployeeDirectory:
    """Dict-backed IEmployeeDirectory. Business ids match case-insensitively."""

    def __init__(self, employees: Iterable[EmployeeRecord] = ()) -> None:
        self._employees: dict[str, dict[str, EmployeeRecord]] = {}
        for employee in employees:
            self.add(employee.company_id, employee)

    def lookup_by_business_id(self, company_id: str, employee_id: str) -> EmployeeRecord | None:
        return self._employees.get(company_id, {}).get(employee_id.strip().upper())

    def list(self, company_id: str) -> list[EmployeeRecord]:
        return list(self._employees.get(company_id, {}).values())

    def add(self, company_id: str, employee: EmployeeRecord) -> EmployeeRecord:
        key = employee.employee_id.strip().upper()
        bucket = self._employees.setdefault(company_id, {})
        if key in bucket:
            raise PersistenceError(f"Employee {employee.employee_id} already exists")
        record = employee.model_copy(update={
            "company_id": company_id,
            "id": employee.id or uuid.uuid4().hex,
        })
        bucket[key] = record
        return record


class MemoryPayrunStore:
    """Dict-backed IPayrunStore.

    ``fail_on`` lists employee ids whose save raises PersistenceError.
    """

    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self._payruns: dict[str, dict[str, PayrunResult]] = {}
        self._fail_on = {e.upper() for e in fail_on}

    @staticmethod
    def _period_key(company_id: str, month: str, year: int) -> str:
        return f"{company_id}:{year}:{month_name(month)}"

    def save(self, company_id: str, result: PayrunResult) -> None:
        if result.employee_id.upper() in self._fail_on:
            raise PersistenceError(f"Write rejected for {result.employee_id}")
        period = self._payruns.setdefault(self._period_key(company_id, result.month, result.year), {})
        period[result.employee_id.upper()] = result.model_copy(update={"benefit_deductions": 0})

    def list_period(self, company_id: str, month: str, year: int) -> list[PayrunResult]:
        return list(self._payruns.get(self._period_key(company_id, month, year), {}).values())

    def has_period(self, company_id: str, month: str, year: int) -> bool:
        return bool(self._payruns.get(self._period_key(company_id, month, year)))

    def clear_period(self, company_id: str, month: str, year: int) -> int:
        return len(self._payruns.pop(self._period_key(company_id, month, year), {}))


class MemoryBenefitSource:
    """Dict-backed IBenefitSource."""

    def __init__(self) -> None:
        self._benefits: dict[str, list[Benefit]] = {}

    def list(self, company_id: str) -> list[Benefit]:
        return list(self._benefits.get(company_id, []))

    def put(self, company_id: str, benefit: Benefit) -> None:
        self._benefits.setdefault(company_id, []).append(benefit)


class MemoryCacheBackend:
    """Dict-backed ICacheBackend; TTLs are recorded but never expire."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
        self.ttls.pop(key, None)
