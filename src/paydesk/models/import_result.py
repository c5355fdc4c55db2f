"""Row-level import models: raw rows, reconciled rows, errors and the batch summary."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field

from paydesk.models.employee import EmployeeRecord
from paydesk.models.payrun import PayrunResult


class RowState(StrEnum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    UNRESOLVED_HEADERS = "UNRESOLVED_HEADERS"
    NORMALIZED = "NORMALIZED"
    VALIDATED = "VALIDATED"
    DUPLICATE_CHECKED = "DUPLICATE_CHECKED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ViolationCode(StrEnum):
    HEADER_UNRESOLVED = "HEADER_UNRESOLVED"
    FIELD_REQUIRED = "FIELD_REQUIRED"
    FIELD_TYPE_INVALID = "FIELD_TYPE_INVALID"
    FIELD_PATTERN_INVALID = "FIELD_PATTERN_INVALID"
    FIELD_OUT_OF_RANGE = "FIELD_OUT_OF_RANGE"
    FIELD_BELOW_MINIMUM_AGE = "FIELD_BELOW_MINIMUM_AGE"
    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    DUPLICATE_EMPLOYEE = "DUPLICATE_EMPLOYEE"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


def _is_blank_cell(cell: Any) -> bool:
    if isinstance(cell, str):
        return not cell.strip()
    if isinstance(cell, float) and cell != cell:  # NaN from dataframe extraction
        return True
    return not cell


class FieldViolation(BaseModel):
    """One failed check for one field of one row."""

    key: str
    code: ViolationCode
    message: str


class RawRow(BaseModel):
    """Untyped cells as extracted from the sheet, with their 1-based line number."""

    cells: list[Any] = Field(default_factory=list)
    source_row_number: int

    @property
    def is_blank(self) -> bool:
        return all(_is_blank_cell(c) for c in self.cells)


class ReconciledRow(BaseModel):
    """A row that passed resolution, validation and the directory check."""

    employee_id: str
    fields: dict[str, Any] = Field(default_factory=dict)
    source_row_number: int
    employee: Optional[EmployeeRecord] = None  # directory match (payrun domain)
    payrun: Optional[PayrunResult] = None  # filled in by the payrun calculator


class ImportRowError(BaseModel):
    """Every problem found on a single rejected row."""

    source_row_number: int
    employee_id: Optional[str] = None
    violations: list[FieldViolation] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


class ImportSummary(BaseModel):
    """Partitioned outcome of one import batch."""

    success: list[ReconciledRow] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)
    unmatched_columns: list[str] = Field(default_factory=list)  # template keys with no header
    unused_headers: list[str] = Field(default_factory=list)  # header cells no column claimed

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_processed(self) -> int:
        return len(self.success) + len(self.errors)
