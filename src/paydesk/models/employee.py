"""Employee and benefit records owned by the company directory.

The import pipeline reads these; only the employee-import flow creates them.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class EmployeeRecord(BaseModel):
    """Single employee in a company's directory."""

    # --- Identity Fields ---
    id: str = ""  # internal id assigned by the directory
    employee_id: str  # business-visible code, e.g. "LIV-1"
    company_id: str = ""
    name: str = ""

    # --- Employment Fields ---
    date_of_joining: Optional[date] = None
    department: str = ""
    designation: str = ""
    category: str = ""  # Regular / Contract / Temporary / Intern
    employee_category: str = ""  # NAPS / NON-NAPS / NATS / NON-NATS
    salary_type: str = ""  # Wages / Salary / Stipend
    status: str = "Active"

    # --- Compensation Fields ---
    fixed_stipend: Decimal = Decimal("0")
    special_allowance: Decimal = Decimal("0")
    ot_rate_per_hour: Optional[Decimal] = None  # None: derive from stipend
    pf_enrolled: bool = False
    esi_enrolled: bool = False

    # --- Personal Fields ---
    gender: str = ""
    date_of_birth: Optional[date] = None
    father_name: str = ""
    permanent_address: str = ""
    communication_address: str = ""
    contact_number: str = ""
    emergency_contact_number: str = ""
    qualification: str = ""
    qualification_trade: str = ""
    blood_group: str = ""

    # --- Statutory & Bank Fields ---
    adhar_number: str = ""
    pan_number: str = ""
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""
    branch: str = ""

    custom_fields: dict[str, str] = Field(default_factory=dict)

    model_config = {"str_strip_whitespace": True}

    @property
    def is_active(self) -> bool:
        return self.status.lower() == "active"


class Benefit(BaseModel):
    """Company benefit whose amount is deducted from net pay when active."""

    id: str = ""
    title: str
    type: str = ""
    description: str = ""
    amount: Decimal = Decimal("0")
    active: bool = True
    employee_id: Optional[str] = None  # None: applies company-wide

    def applies_to(self, *employee_ids: str) -> bool:
        """True when active and either company-wide or tagged with one of the given ids."""
        if not self.active:
            return False
        return self.employee_id is None or self.employee_id in employee_ids
