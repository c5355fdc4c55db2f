"""Column template registry: built-in defaults, user edits and per-company persistence.

Every edit function is pure: it takes a column list and returns a new one,
leaving the input untouched so callers decide when to persist.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from paydesk.core.exceptions import DuplicateKeyError, ProtectedFieldError, TemplateError, UnknownColumnError
from paydesk.core.protocols import ITemplateStore
from paydesk.core.types import Grid
from paydesk.importing.headers import normalize_label
from paydesk.models.template import (
    CUSTOM_KEY_PREFIX,
    CUSTOM_SYSTEM_LABEL,
    ImportDomain,
    TemplateColumn,
    ValueType,
)

logger = logging.getLogger(__name__)

TEMPLATE_SAMPLE_ROW_LABEL = "Sr-No-"

BLOOD_GROUPS = ["A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-"]
GENDERS = ["Male", "Female", "Other"]
SALARY_TYPES = ["Wages", "Salary", "Stipend"]
CATEGORIES = ["Regular", "Contract", "Temporary", "Intern"]
EMPLOYEE_CATEGORIES = ["NAPS", "NON-NAPS", "NATS", "NON-NATS"]


def _col(
    key: str,
    label: str,
    required: bool = False,
    value_type: ValueType = ValueType.STRING,
    enum_values: list[str] | None = None,
) -> TemplateColumn:
    return TemplateColumn(
        key=key,
        display_name=label,
        system_label=label,
        required=required,
        value_type=value_type,
        enum_values=enum_values or [],
    )


_EMPLOYEE_DEFAULTS: tuple[TemplateColumn, ...] = (
    _col("empIdNo", "Employee ID", True),
    _col("name", "Full Name", True),
    _col("dateOfJoining", "Date of Joining", True, ValueType.DATE),
    _col("department", "Department", True),
    _col("designation", "Designation", True),
    _col("gender", "Gender", True, ValueType.ENUM, GENDERS),
    _col("fixedStipend", "Fixed Stipend", True, ValueType.NUMBER),
    _col("fatherName", "Father's Name", True),
    _col("permanentAddress", "Permanent Address", True),
    _col("communicationAddress", "Communication Address", True),
    _col("contactNumber", "Contact Number", True),
    _col("emergencyContactNumber", "Emergency Contact", True),
    _col("qualification", "Qualification", True),
    _col("qualificationTrade", "Qualification Trade"),
    _col("bloodGroup", "Blood Group", True, ValueType.ENUM, BLOOD_GROUPS),
    _col("adharNumber", "Aadhar Number", True),
    _col("panNumber", "PAN Number", True),
    _col("bankName", "Bank Name", True),
    _col("accountNumber", "Account Number", True),
    _col("ifscCode", "IFSC Code", True),
    _col("branch", "Branch", True),
    _col("category", "Category", True, ValueType.ENUM, CATEGORIES),
    _col("DOB", "Date of Birth", True, ValueType.DATE),
    _col("salaryType", "Salary Type", True, ValueType.ENUM, SALARY_TYPES),
    _col("employeeCategory", "Employee Category", True, ValueType.ENUM, EMPLOYEE_CATEGORIES),
)

_PAYRUN_DEFAULTS: tuple[TemplateColumn, ...] = (
    _col("empId", "Employee ID", True),
    _col("name", "Trainee Name"),
    _col("presentDays", "Present Days", True, ValueType.NUMBER),
    _col("holidays", "Holidays", value_type=ValueType.NUMBER),
    _col("otHours", "OT Hours", value_type=ValueType.NUMBER),
    _col("totalFixedDays", "Total Fixed Days", value_type=ValueType.NUMBER),
    _col("lopDays", "LOP Days", value_type=ValueType.NUMBER),
    _col("transport", "Transport", value_type=ValueType.NUMBER),
    _col("canteen", "Canteen", value_type=ValueType.NUMBER),
    _col("managementFee", "Management Fee", value_type=ValueType.NUMBER),
    _col("insurance", "Insurance", value_type=ValueType.NUMBER),
    _col("dbt", "DBT", value_type=ValueType.NUMBER),
    _col("remarks", "Remarks"),
)

_DEFAULTS: dict[ImportDomain, tuple[TemplateColumn, ...]] = {
    ImportDomain.EMPLOYEE: _EMPLOYEE_DEFAULTS,
    ImportDomain.PAYRUN: _PAYRUN_DEFAULTS,
}

# Column whose value is the business employee identifier, per domain.
IDENTIFIER_KEYS: dict[ImportDomain, str] = {
    ImportDomain.EMPLOYEE: "empIdNo",
    ImportDomain.PAYRUN: "empId",
}


def get_default_template(domain: ImportDomain) -> list[TemplateColumn]:
    """Return a fresh copy of the built-in column list for a domain."""
    return [c.model_copy(deep=True) for c in _DEFAULTS[ImportDomain(domain)]]


def merge_with_saved(default: list[TemplateColumn], saved: list[TemplateColumn]) -> list[TemplateColumn]:
    """Keep the saved order, then append defaults the saved template predates."""
    saved_keys = {c.key for c in saved}
    merged = [c.model_copy(deep=True) for c in saved]
    merged.extend(c.model_copy(deep=True) for c in default if c.key not in saved_keys)
    return merged


def validate_template(columns: list[TemplateColumn]) -> None:
    """Raise DuplicateKeyError if any key appears twice."""
    seen: set[str] = set()
    for col in columns:
        if col.key in seen:
            raise DuplicateKeyError(col.key)
        seen.add(col.key)


def _index_of(columns: list[TemplateColumn], key: str) -> int:
    for idx, col in enumerate(columns):
        if col.key == key:
            return idx
    raise UnknownColumnError(key)


def custom_key_for(display_name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", display_name.strip().lower()).strip("_")
    if not slug:
        raise TemplateError(f"Custom column name {display_name!r} has no usable characters")
    return f"{CUSTOM_KEY_PREFIX}{slug}"


def add_custom_column(columns: list[TemplateColumn], display_name: str) -> list[TemplateColumn]:
    """Append a user-defined, optional string column."""
    key = custom_key_for(display_name)
    normalized = normalize_label(key)
    if any(normalize_label(c.key) == normalized for c in columns):
        raise DuplicateKeyError(key)
    column = TemplateColumn(
        key=key,
        display_name=display_name,
        system_label=CUSTOM_SYSTEM_LABEL,
        required=False,
        value_type=ValueType.STRING,
    )
    logger.debug("Added custom column %s (%r)", key, display_name)
    return [*columns, column]


def add_system_column(columns: list[TemplateColumn], domain: ImportDomain, key: str) -> list[TemplateColumn]:
    """Re-add a built-in field that was previously removed from the template."""
    if any(c.key == key for c in columns):
        raise DuplicateKeyError(key)
    for col in _DEFAULTS[ImportDomain(domain)]:
        if col.key == key:
            return [*columns, col.model_copy(deep=True)]
    raise UnknownColumnError(key)


def remove_column(columns: list[TemplateColumn], key: str) -> list[TemplateColumn]:
    idx = _index_of(columns, key)
    if columns[idx].is_protected:
        raise ProtectedFieldError(key)
    return columns[:idx] + columns[idx + 1:]


def rename_column(columns: list[TemplateColumn], key: str, new_display_name: str) -> list[TemplateColumn]:
    """Change the header text only; key and system label stay fixed."""
    if not new_display_name or not new_display_name.strip():
        raise TemplateError("Header name cannot be blank")
    idx = _index_of(columns, key)
    updated = list(columns)
    updated[idx] = columns[idx].model_copy(update={"display_name": new_display_name.strip()})
    return updated


def _sample_value(column: TemplateColumn) -> Any:
    if column.key in ("empIdNo", "empId"):
        return "EMP1001"
    if column.key == "name":
        return "John Doe"
    if column.key == "fixedStipend":
        return 25000
    if column.value_type == ValueType.DATE:
        return "2023-01-15"
    if column.value_type == ValueType.ENUM and column.enum_values:
        return column.enum_values[0]
    if column.value_type == ValueType.NUMBER:
        return 0
    return "Sample"


def build_template_sample(columns: list[TemplateColumn]) -> Grid:
    """Header row plus one example row, ready for a spreadsheet writer."""
    headers = [TEMPLATE_SAMPLE_ROW_LABEL, *(c.display_name for c in columns)]
    sample = ["1", *(_sample_value(c) for c in columns)]
    return [headers, sample]


class TemplateRegistry:
    """Load/merge-defaults/save lifecycle for per-company templates."""

    def __init__(self, store: ITemplateStore) -> None:
        self._store = store

    def load(self, company_id: str, domain: ImportDomain) -> list[TemplateColumn]:
        defaults = get_default_template(domain)
        saved = self._store.load(company_id, domain)
        if not saved:
            return defaults
        return merge_with_saved(defaults, saved)

    def save(self, company_id: str, domain: ImportDomain, columns: list[TemplateColumn]) -> None:
        validate_template(columns)
        self._store.save(company_id, domain, columns)
        logger.info("Saved %s template for company %s (%d columns)", domain, company_id, len(columns))
