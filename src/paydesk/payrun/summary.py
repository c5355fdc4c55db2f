"""Period totals and presentation-time benefit adjustments."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from paydesk.models.employee import Benefit
from paydesk.models.payrun import PayrunPeriodSummary, PayrunResult


def benefit_total(benefits: Iterable[Benefit], *employee_ids: str) -> Decimal:
    return sum((b.amount for b in benefits if b.applies_to(*employee_ids)), Decimal("0"))


def apply_benefits(result: PayrunResult, benefits: Iterable[Benefit]) -> PayrunResult:
    """Attach benefit deductions for display; stored figures are left as-is.

    A benefit tagged with either the internal record id or the business id
    applies to the result.
    """
    total = benefit_total(benefits, *result.benefit_keys)
    return result.model_copy(update={"benefit_deductions": total})


def summarize_period(
    month: str,
    year: int,
    results: Iterable[PayrunResult],
    benefits: Iterable[Benefit] = (),
) -> PayrunPeriodSummary:
    benefits = list(benefits)
    summary = PayrunPeriodSummary(month=month, year=year)
    for result in results:
        adjusted = apply_benefits(result, benefits)
        summary.total_employees += 1
        summary.total_salary += adjusted.adjusted_netpay
        summary.total_billable += result.billable_total
        summary.total_gst += result.gst
        summary.total_grand_total += result.grand_total
    return summary
