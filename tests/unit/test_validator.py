"""Tests for row validation rules."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from paydesk.core.config import ImportConfig
from paydesk.importing.normalizer import Normalized, normalize_value
from paydesk.importing.templates import get_default_template
from paydesk.importing.validator import RowValidator, canonical_enum_value, compute_age, rule_for, validate_row
from paydesk.models.import_result import ViolationCode
from paydesk.models.template import ImportDomain, TemplateColumn

TODAY = date(2024, 6, 15)

VALID_EMPLOYEE: dict[str, Any] = {
    "empIdNo": "EMP2001",
    "name": "Asha Verma",
    "dateOfJoining": "2023-01-15",
    "department": "Assembly",
    "designation": "Trainee",
    "gender": "female",
    "fixedStipend": "15000",
    "fatherName": "Ramesh Verma",
    "permanentAddress": "12 Mill Road, Pune",
    "communicationAddress": "12 Mill Road, Pune",
    "contactNumber": "9876543210",
    "emergencyContactNumber": "9123456780",
    "qualification": "ITI",
    "bloodGroup": "O+",
    "adharNumber": "123456789012",
    "panNumber": "abcde1234f",
    "bankName": "State Bank",
    "accountNumber": "00112233445",
    "ifscCode": "sbin0001234",
    "branch": "Pune Main",
    "category": "Intern",
    "DOB": "1990-05-20",
    "salaryType": "Stipend",
    "employeeCategory": "NAPS",
}


def _normalize(row: dict[str, Any], columns: list[TemplateColumn]) -> dict[str, Normalized]:
    values = {}
    for column in columns:
        rule = rule_for(column.key)
        values[column.key] = normalize_value(row.get(column.key), column.value_type,
                                             upper=bool(rule and rule.upper_case))
    return values


@pytest.fixture
def employee_columns() -> list[TemplateColumn]:
    return get_default_template(ImportDomain.EMPLOYEE)


@pytest.fixture
def validator() -> RowValidator:
    return RowValidator(today=lambda: TODAY)


def _codes(violations) -> list[ViolationCode]:
    return [v.code for v in violations]


class TestEmployeeRow:
    def test_valid_row_has_no_violations(self, validator, employee_columns):
        assert validator.validate(_normalize(VALID_EMPLOYEE, employee_columns), employee_columns, 2) == []

    def test_collects_every_violation(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "panNumber": "ABC123", "ifscCode": "SBIN1234567", "contactNumber": "12345"}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 4)
        assert {v.key for v in violations} == {"panNumber", "ifscCode", "contactNumber"}
        assert all(v.message.startswith("Row 4: ") for v in violations)

    def test_missing_required_value(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "department": "  "}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 3)
        assert len(violations) == 1
        assert violations[0].code == ViolationCode.FIELD_REQUIRED
        assert violations[0].message == "Row 3: Department is required"

    def test_optional_blank_is_fine(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "qualificationTrade": ""}
        assert validator.validate(_normalize(row, employee_columns), employee_columns, 2) == []

    def test_enum_is_case_insensitive(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "gender": "FEMALE", "bloodGroup": "ab+"}
        assert validator.validate(_normalize(row, employee_columns), employee_columns, 2) == []

    def test_enum_rejects_unknown_option(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "bloodGroup": "C+"}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_PATTERN_INVALID]
        assert "must be one of" in violations[0].message

    def test_unparseable_date_is_type_error(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "dateOfJoining": "sometime"}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_TYPE_INVALID]
        assert violations[0].message == "Row 2: Date of Joining must be a valid date"

    def test_emergency_contact_must_differ(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "emergencyContactNumber": VALID_EMPLOYEE["contactNumber"]}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 2)
        assert [v.message for v in violations] == ["Row 2: Emergency contact cannot be same as contact number"]

    def test_string_length_limit(self, employee_columns):
        validator = RowValidator(ImportConfig(max_string_length=20), today=lambda: TODAY)
        row = {**VALID_EMPLOYEE, "department": "Research and Development"}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_OUT_OF_RANGE]


class TestMinimumAge:
    def test_exactly_eighteen_passes(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "DOB": "2006-06-15"}
        assert validator.validate(_normalize(row, employee_columns), employee_columns, 2) == []

    def test_one_day_short_fails(self, validator, employee_columns):
        row = {**VALID_EMPLOYEE, "DOB": "2006-06-16"}
        violations = validator.validate(_normalize(row, employee_columns), employee_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_BELOW_MINIMUM_AGE]
        assert violations[0].message == "Row 2: Employee must be at least 18 years old"

    def test_compute_age(self):
        assert compute_age(date(2000, 2, 29), date(2018, 2, 28)) == 17
        assert compute_age(date(2000, 2, 29), date(2018, 3, 1)) == 18


class TestPayrunRow:
    @pytest.fixture
    def payrun_columns(self) -> list[TemplateColumn]:
        return get_default_template(ImportDomain.PAYRUN)

    def test_present_days_range(self, validator, payrun_columns):
        values = _normalize({"empId": "EMP1001", "presentDays": "32"}, payrun_columns)
        violations = validator.validate(values, payrun_columns, 2)
        assert [v.message for v in violations] == ["Row 2: Present Days must be at most 31"]

    def test_negative_amount(self, validator, payrun_columns):
        values = _normalize({"empId": "EMP1001", "presentDays": "20", "transport": "-10"}, payrun_columns)
        violations = validator.validate(values, payrun_columns, 2)
        assert [v.message for v in violations] == ["Row 2: Transport must be at least 0"]

    def test_amount_ceiling(self, validator, payrun_columns):
        values = _normalize({"empId": "EMP1001", "presentDays": "20", "transport": "1e30"}, payrun_columns)
        violations = validator.validate(values, payrun_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_OUT_OF_RANGE]
        assert violations[0].message == "Row 2: Transport must be at most 10000000"

    def test_ot_hours_ceiling(self, validator, payrun_columns):
        values = _normalize({"empId": "EMP1001", "presentDays": "20", "otHours": "745"}, payrun_columns)
        violations = validator.validate(values, payrun_columns, 2)
        assert [v.message for v in violations] == ["Row 2: OT Hours must be at most 744"]

    def test_non_numeric_value(self, validator, payrun_columns):
        values = _normalize({"empId": "EMP1001", "presentDays": "twenty"}, payrun_columns)
        violations = validator.validate(values, payrun_columns, 2)
        assert _codes(violations) == [ViolationCode.FIELD_TYPE_INVALID]

    def test_unresolved_required_column(self, validator, minimal_template):
        values = _normalize({"empId": "EMP1001"}, minimal_template[:1])
        violations = validator.validate(values, minimal_template, 5, frozenset({"presentDays"}))
        assert _codes(violations) == [ViolationCode.HEADER_UNRESOLVED]
        assert violations[0].message == "Row 5: Present Days is required (column not found in file)"


def test_validate_row_wrapper(minimal_template):
    values = _normalize({"empId": "EMP1001", "presentDays": ""}, minimal_template)
    violations = validate_row(values, minimal_template, 2, today=TODAY)
    assert [v.message for v in violations] == ["Row 2: Present Days is required"]


def test_canonical_enum_value():
    column = get_default_template(ImportDomain.EMPLOYEE)[5]
    assert column.key == "gender"
    assert canonical_enum_value(column, "fEmAlE") == "Female"
