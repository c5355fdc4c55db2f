"""Batch reconciliation: drive every data row of a grid to ACCEPTED or REJECTED.

Per-row state machine::

    PENDING -> RESOLVED | UNRESOLVED_HEADERS -> NORMALIZED
            -> VALIDATED | REJECTED -> DUPLICATE_CHECKED -> ACCEPTED | REJECTED

A bad row is recorded and the batch moves on. Only a structurally unusable
grid raises ``ImportAbortedError`` before any row is looked at.

The employee directory is read once, before the first row, and used as a
snapshot. Edits made to the directory while a batch is running are not seen.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from paydesk.core.exceptions import ImportAbortedError
from paydesk.core.protocols import IEmployeeDirectory
from paydesk.core.types import Grid
from paydesk.importing.headers import HeaderIndex, resolve_headers
from paydesk.importing.normalizer import Normalized, normalize_value
from paydesk.importing.templates import IDENTIFIER_KEYS, validate_template
from paydesk.importing.validator import RowValidator, canonical_enum_value, rule_for
from paydesk.models.employee import EmployeeRecord
from paydesk.models.import_result import (
    FieldViolation,
    ImportRowError,
    ImportSummary,
    RawRow,
    ReconciledRow,
    RowState,
    ViolationCode,
)
from paydesk.models.template import ImportDomain, TemplateColumn, ValueType

logger = logging.getLogger(__name__)


class BatchReconciler:
    """Match, validate and partition the rows of one uploaded sheet."""

    def __init__(
        self,
        directory: IEmployeeDirectory,
        *,
        domain: ImportDomain = ImportDomain.PAYRUN,
        validator: RowValidator | None = None,
    ) -> None:
        self._directory = directory
        self._domain = ImportDomain(domain)
        self._validator = validator or RowValidator()
        self._id_key = IDENTIFIER_KEYS[self._domain]

    def reconcile(self, grid: Grid, template: list[TemplateColumn], company_id: str) -> ImportSummary:
        if not grid or len(grid) < 2 or not any(grid[0] or []):
            raise ImportAbortedError("File is empty or missing headers", company_id)
        validate_template(template)

        index = resolve_headers(list(grid[0]), template)
        required = [c for c in template if c.required]
        if required and not any(index.is_resolved(c.key) for c in required):
            raise ImportAbortedError("None of the required columns were found in the header row", company_id)

        snapshot = self._snapshot(company_id)
        logger.info(
            "Reconciling %d data rows for company %s (%s) against %d directory records",
            len(grid) - 1, company_id, self._domain, sum(len(v) for v in snapshot.values()),
        )

        summary = ImportSummary(unmatched_columns=index.unmatched_columns, unused_headers=index.unused_headers)
        seen_ids: set[str] = set()
        for row_number, cells in enumerate(grid[1:], start=2):
            raw = RawRow(cells=list(cells or []), source_row_number=row_number)
            if raw.is_blank:
                continue
            outcome = self._reconcile_row(raw, template, index, snapshot, seen_ids)
            if isinstance(outcome, ReconciledRow):
                summary.success.append(outcome)
            else:
                summary.errors.append(outcome)

        logger.info(
            "Reconciled company %s: %d processed, %d accepted, %d rejected",
            company_id, summary.total_processed, len(summary.success), len(summary.errors),
        )
        return summary

    def _snapshot(self, company_id: str) -> dict[str, list[EmployeeRecord]]:
        by_id: dict[str, list[EmployeeRecord]] = defaultdict(list)
        for employee in self._directory.list(company_id):
            by_id[employee.employee_id.strip().lower()].append(employee)
        return by_id

    def _reconcile_row(
        self,
        raw: RawRow,
        template: list[TemplateColumn],
        index: HeaderIndex,
        snapshot: dict[str, list[EmployeeRecord]],
        seen_ids: set[str],
    ) -> ReconciledRow | ImportRowError:
        row_number = raw.source_row_number
        state = RowState.PENDING

        unresolved = frozenset(index.unmatched_columns)
        if any(c.required and c.key in unresolved for c in template):
            state = RowState.UNRESOLVED_HEADERS
        else:
            state = RowState.RESOLVED

        values: dict[str, Normalized] = {}
        for column in template:
            position = index.position_of(column.key)
            if position is None:
                continue
            cell = raw.cells[position] if position < len(raw.cells) else None
            rule = rule_for(column.key)
            values[column.key] = normalize_value(cell, column.value_type, upper=bool(rule and rule.upper_case))
        state = RowState.NORMALIZED

        id_value = values.get(self._id_key)
        employee_id = str(id_value.value) if id_value is not None and id_value.is_value else None

        violations = self._validator.validate(values, template, row_number, unresolved)
        if violations:
            return self._reject(raw, employee_id, violations, state)
        state = RowState.VALIDATED

        if employee_id is None:
            return self._reject(raw, None, [FieldViolation(
                key=self._id_key,
                code=ViolationCode.FIELD_REQUIRED,
                message=f"Row {row_number}: Employee ID is required",
            )], state)

        employee, violation = self._check_directory(employee_id, row_number, snapshot, seen_ids)
        state = RowState.DUPLICATE_CHECKED
        if violation is not None:
            return self._reject(raw, employee_id, [violation], state)

        by_key = {c.key: c for c in template}
        fields: dict[str, Any] = {}
        for key, normalized in values.items():
            if key == self._id_key or not normalized.is_value:
                continue
            column = by_key[key]
            value = normalized.value
            if column.value_type == ValueType.ENUM:
                value = canonical_enum_value(column, value)
            fields[key] = value

        logger.debug("Row %d %s -> %s", row_number, state, RowState.ACCEPTED)
        return ReconciledRow(
            employee_id=employee.employee_id if employee is not None else employee_id,
            fields=fields,
            source_row_number=row_number,
            employee=employee,
        )

    def _check_directory(
        self,
        employee_id: str,
        row_number: int,
        snapshot: dict[str, list[EmployeeRecord]],
        seen_ids: set[str],
    ) -> tuple[EmployeeRecord | None, FieldViolation | None]:
        lookup = employee_id.strip().lower()
        if lookup in seen_ids:
            return None, FieldViolation(
                key=self._id_key,
                code=ViolationCode.DUPLICATE_EMPLOYEE,
                message=f"Row {row_number}: Employee ID {employee_id} appears more than once in the file",
            )
        seen_ids.add(lookup)

        matches = snapshot.get(lookup, [])
        if self._domain == ImportDomain.EMPLOYEE:
            if matches:
                return None, FieldViolation(
                    key=self._id_key,
                    code=ViolationCode.DUPLICATE_EMPLOYEE,
                    message=f"Row {row_number}: Employee ID {employee_id} already exists",
                )
            return None, None

        if not matches:
            return None, FieldViolation(
                key=self._id_key,
                code=ViolationCode.EMPLOYEE_NOT_FOUND,
                message=f"Row {row_number}: Employee with ID {employee_id} not found",
            )
        if len(matches) > 1:
            return None, FieldViolation(
                key=self._id_key,
                code=ViolationCode.DUPLICATE_EMPLOYEE,
                message=f"Row {row_number}: Employee ID {employee_id} matches more than one employee",
            )
        return matches[0], None

    @staticmethod
    def _reject(
        raw: RawRow, employee_id: str | None, violations: list[FieldViolation], state: RowState
    ) -> ImportRowError:
        logger.debug(
            "Row %d %s -> %s: %s",
            raw.source_row_number, state, RowState.REJECTED, "; ".join(v.message for v in violations),
        )
        return ImportRowError(
            source_row_number=raw.source_row_number,
            employee_id=employee_id,
            violations=violations,
        )


def reconcile_batch(
    grid: Grid,
    template: list[TemplateColumn],
    company_id: str,
    directory: IEmployeeDirectory,
    *,
    domain: ImportDomain = ImportDomain.PAYRUN,
    validator: RowValidator | None = None,
) -> ImportSummary:
    """Reconcile a raw grid (header row first) against a company's directory."""
    return BatchReconciler(directory, domain=domain, validator=validator).reconcile(grid, template, company_id)
