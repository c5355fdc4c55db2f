"""Payrun result and period summary models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class PayrunResult(BaseModel):
    """Calculated payrun for one employee for one month+year."""

    employee_id: str
    employee_record_id: str = ""  # directory-internal id, used for benefit tagging
    employee_name: str = ""
    month: str
    year: int

    # --- Attendance Inputs ---
    present_days: Decimal = Decimal("0")
    holidays: Decimal = Decimal("0")
    ot_hours: Decimal = Decimal("0")
    total_fixed_days: Decimal = Decimal("0")
    lop_days: Decimal = Decimal("0")
    total_payable_days: Decimal = Decimal("0")

    # --- Earnings ---
    fixed_stipend: Decimal = Decimal("0")
    special_allowance: Decimal = Decimal("0")
    earned_stipend: Decimal = Decimal("0")
    earned_special_allowance: Decimal = Decimal("0")
    earnings_ot: Decimal = Decimal("0")
    transport: Decimal = Decimal("0")
    canteen: Decimal = Decimal("0")
    attendance_incentive: Decimal = Decimal("0")
    total_earning: Decimal = Decimal("0")

    # --- Deductions ---
    management_fee: Decimal = Decimal("0")
    insurance: Decimal = Decimal("0")
    lop: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")

    # --- Statutory & Billing ---
    pf_amount: Decimal = Decimal("0")
    esi_amount: Decimal = Decimal("0")
    billable_total: Decimal = Decimal("0")
    gst: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

    final_netpay: Decimal = Decimal("0")  # total_earning - total_deductions, may be negative
    dbt: Decimal = Decimal("0")  # direct benefit transfer, passed through from the sheet
    remarks: str = ""

    # Presentation only: never serialized, never persisted.
    benefit_deductions: Decimal = Field(default=Decimal("0"), exclude=True)

    @property
    def benefit_keys(self) -> tuple[str, ...]:
        """Ids a benefit may be tagged with: internal record id and business id."""
        return tuple(i for i in (self.employee_record_id, self.employee_id) if i)

    @property
    def adjusted_total_deductions(self) -> Decimal:
        return self.total_deductions + self.benefit_deductions

    @property
    def adjusted_netpay(self) -> Decimal:
        return self.final_netpay - self.benefit_deductions


class PayrunPeriodSummary(BaseModel):
    """Company totals for one payrun month."""

    month: str
    year: int
    total_employees: int = 0
    total_salary: Decimal = Decimal("0")  # net pay after benefits
    total_billable: Decimal = Decimal("0")
    total_gst: Decimal = Decimal("0")
    total_grand_total: Decimal = Decimal("0")
