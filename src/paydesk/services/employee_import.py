"""EmployeeImportService: bulk-create directory records from an uploaded sheet."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from paydesk.core.exceptions import PersistenceError
from paydesk.core.types import Grid
from paydesk.models.employee import EmployeeRecord
from paydesk.models.import_result import ImportSummary, ReconciledRow
from paydesk.models.template import ImportDomain, TemplateColumn
from paydesk.services.base import BaseImportService

logger = logging.getLogger(__name__)

# Template key -> EmployeeRecord attribute
EMPLOYEE_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "dateOfJoining": "date_of_joining",
    "department": "department",
    "designation": "designation",
    "gender": "gender",
    "fixedStipend": "fixed_stipend",
    "fatherName": "father_name",
    "permanentAddress": "permanent_address",
    "communicationAddress": "communication_address",
    "contactNumber": "contact_number",
    "emergencyContactNumber": "emergency_contact_number",
    "qualification": "qualification",
    "qualificationTrade": "qualification_trade",
    "bloodGroup": "blood_group",
    "adharNumber": "adhar_number",
    "panNumber": "pan_number",
    "bankName": "bank_name",
    "accountNumber": "account_number",
    "ifscCode": "ifsc_code",
    "branch": "branch",
    "category": "category",
    "DOB": "date_of_birth",
    "salaryType": "salary_type",
    "employeeCategory": "employee_category",
}


def _custom_text(value: Any) -> str:
    if isinstance(value, Decimal):
        return str(int(value)) if value == value.to_integral_value() else str(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def build_employee(company_id: str, row: ReconciledRow, columns: list[TemplateColumn]) -> EmployeeRecord:
    """Map an accepted row's template keys onto an EmployeeRecord.

    Custom columns land in ``custom_fields`` under their display name.
    """
    display_names = {c.key: c.display_name for c in columns}
    attrs: dict[str, Any] = {}
    custom: dict[str, str] = {}
    for key, value in row.fields.items():
        if key in EMPLOYEE_FIELD_MAP:
            attrs[EMPLOYEE_FIELD_MAP[key]] = value
        elif key in display_names:
            custom[display_names[key]] = _custom_text(value)
    return EmployeeRecord(
        id=uuid.uuid4().hex,
        employee_id=row.employee_id,
        company_id=company_id,
        custom_fields=custom,
        **attrs,
    )


class EmployeeImportService(BaseImportService):
    domain = ImportDomain.EMPLOYEE

    def import_grid(self, company_id: str, grid: Grid) -> ImportSummary:
        columns = self.load_template(company_id)
        summary = self.reconcile(company_id, grid, columns)

        accepted: list[ReconciledRow] = []
        for row in summary.success:
            employee = build_employee(company_id, row, columns)
            try:
                stored = self._directory.add(company_id, employee)
            except PersistenceError as exc:
                summary.errors.append(self.persistence_failure(row, exc))
                continue
            accepted.append(row.model_copy(update={"employee": stored}))

        summary.success = accepted
        summary.errors.sort(key=lambda e: e.source_row_number)
        logger.info(
            "Employee import for company %s: %d created, %d errors",
            company_id, len(summary.success), len(summary.errors),
        )
        return summary
