"""PayrunCalculator: derive earnings, deductions, statutory and billing figures.

Order of computation:

1. earned stipend / special allowance, pro-rated by payable vs fixed days
2. OT earnings (rate x hours), transport, canteen, attendance incentive
3. total earning
4. deductions: management fee + insurance + canteen + LOP
5. PF / ESI employer contributions when the employee is enrolled
6. billable total, GST, grand total
7. final net pay = total earning - total deductions (never clamped)

Active benefits are summed onto ``benefit_deductions``, a presentation-only
field that is excluded when the result is serialized or persisted.
"""

from __future__ import annotations

import calendar
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from paydesk.core.config import PayrunConfig
from paydesk.models.employee import Benefit, EmployeeRecord
from paydesk.models.import_result import ReconciledRow
from paydesk.models.payrun import PayrunResult
from paydesk.payrun.summary import apply_benefits

_CENT = Decimal("0.01")
_ZERO = Decimal("0")

MONTH_NAMES = list(calendar.month_name)[1:]


def money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def month_number(month: str | int) -> int:
    """Accept "March", "mar", "3" or 3."""
    text = str(month).strip()
    if text.isdigit() and 1 <= int(text) <= 12:
        return int(text)
    for idx, name in enumerate(MONTH_NAMES, start=1):
        if text.lower() in (name.lower(), name[:3].lower()):
            return idx
    raise ValueError(f"Unknown month {month!r}")


def month_name(month: str | int) -> str:
    return MONTH_NAMES[month_number(month) - 1]


def _dec(fields: dict[str, Any], key: str) -> Decimal:
    value = fields.get(key)
    if value is None or value == "":
        return _ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


class PayrunCalculator:
    """Computes a PayrunResult from one reconciled attendance row."""

    def __init__(self, policy: PayrunConfig | None = None) -> None:
        self._policy = policy or PayrunConfig()

    def calculate(
        self,
        row: ReconciledRow,
        employee: EmployeeRecord,
        benefits: Iterable[Benefit] = (),
        *,
        month: str,
        year: int,
    ) -> PayrunResult:
        policy = self._policy
        fields = row.fields

        present_days = _dec(fields, "presentDays")
        holidays = _dec(fields, "holidays")
        ot_hours = _dec(fields, "otHours")
        lop_days = _dec(fields, "lopDays")
        fixed_days = _dec(fields, "totalFixedDays")
        if fixed_days <= 0:
            fixed_days = Decimal(calendar.monthrange(year, month_number(month))[1])
        payable_days = present_days + holidays

        stipend = employee.fixed_stipend
        special = employee.special_allowance
        daily_rate = stipend / fixed_days

        earned_stipend = money(stipend * payable_days / fixed_days)
        earned_special = money(special * payable_days / fixed_days)
        ot_rate = (
            employee.ot_rate_per_hour
            if employee.ot_rate_per_hour is not None
            else daily_rate / policy.standard_hours_per_day
        )
        earnings_ot = money(ot_rate * ot_hours)
        transport = money(_dec(fields, "transport"))
        canteen = money(_dec(fields, "canteen"))
        incentive = (
            money(policy.attendance_incentive_amount)
            if present_days >= policy.attendance_incentive_min_days
            else _ZERO
        )
        total_earning = earned_stipend + earned_special + earnings_ot + transport + canteen + incentive

        management_fee = money(_dec(fields, "managementFee"))
        insurance = money(_dec(fields, "insurance"))
        lop = money(daily_rate * lop_days)
        total_deductions = management_fee + insurance + canteen + lop

        pf_amount = money(policy.pf_rate * min(earned_stipend, policy.pf_wage_ceiling)) if employee.pf_enrolled else _ZERO
        esi_amount = (
            money(policy.esi_rate * total_earning)
            if employee.esi_enrolled and total_earning <= policy.esi_wage_ceiling
            else _ZERO
        )
        billable_total = total_earning + pf_amount + esi_amount
        gst = money(billable_total * policy.gst_rate)

        result = PayrunResult(
            employee_id=employee.employee_id,
            employee_record_id=employee.id,
            employee_name=str(fields.get("name") or employee.name),
            month=month_name(month),
            year=year,
            present_days=present_days,
            holidays=holidays,
            ot_hours=ot_hours,
            total_fixed_days=fixed_days,
            lop_days=lop_days,
            total_payable_days=payable_days,
            fixed_stipend=stipend,
            special_allowance=special,
            earned_stipend=earned_stipend,
            earned_special_allowance=earned_special,
            earnings_ot=earnings_ot,
            transport=transport,
            canteen=canteen,
            attendance_incentive=incentive,
            total_earning=total_earning,
            management_fee=management_fee,
            insurance=insurance,
            lop=lop,
            total_deductions=total_deductions,
            pf_amount=pf_amount,
            esi_amount=esi_amount,
            billable_total=billable_total,
            gst=gst,
            grand_total=billable_total + gst,
            final_netpay=total_earning - total_deductions,
            dbt=money(_dec(fields, "dbt")),
            remarks=str(fields.get("remarks") or ""),
        )
        return apply_benefits(result, benefits)


def calculate_payrun(
    row: ReconciledRow,
    employee: EmployeeRecord,
    benefits: Iterable[Benefit] = (),
    *,
    month: str,
    year: int,
    policy: PayrunConfig | None = None,
) -> PayrunResult:
    return PayrunCalculator(policy).calculate(row, employee, benefits, month=month, year=year)
