"""Shared fixtures for unit tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from paydesk.models.employee import EmployeeRecord
from paydesk.models.template import TemplateColumn, ValueType
from tests.fakes import MemoryEmployeeDirectory

COMPANY = "ACME"


def make_employee(employee_id: str, **overrides) -> EmployeeRecord:
    data = {
        "id": employee_id.lower(),
        "employee_id": employee_id,
        "company_id": COMPANY,
        "name": f"Employee {employee_id}",
        "fixed_stipend": Decimal("30000"),
    }
    data.update(overrides)
    return EmployeeRecord(**data)


@pytest.fixture
def directory() -> MemoryEmployeeDirectory:
    return MemoryEmployeeDirectory([
        make_employee("EMP1001", pf_enrolled=True),
        make_employee("EMP1002", fixed_stipend=Decimal("12000"), esi_enrolled=True),
    ])


@pytest.fixture
def minimal_template() -> list[TemplateColumn]:
    """Two required columns: employee id and present days."""
    return [
        TemplateColumn(key="empId", display_name="Employee ID", system_label="Employee ID", required=True),
        TemplateColumn(
            key="presentDays", display_name="Present Days", system_label="Present Days",
            required=True, value_type=ValueType.NUMBER,
        ),
    ]
