"""Tests for the payrun and employee import services."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from paydesk.core.config import AppSettings
from paydesk.core.exceptions import ImportAbortedError, PayrunPeriodExistsError
from paydesk.importing.templates import TemplateRegistry, add_custom_column, get_default_template
from paydesk.models.employee import Benefit
from paydesk.models.import_result import ImportSummary, ReconciledRow, ViolationCode
from paydesk.models.template import ImportDomain
from paydesk.services.employee_import import EmployeeImportService, build_employee
from paydesk.services.payrun_import import PayrunImportService
from tests.fakes import MemoryBenefitSource, MemoryEmployeeDirectory, MemoryPayrunStore, MemoryTemplateStore
from tests.unit.conftest import COMPANY, make_employee

PAYRUN_GRID = [
    ["Employee ID", "Trainee Name", "Present Days", "Total Fixed Days", "Transport"],
    ["EMP1001", "Asha", 20, 30, 150],
    ["EMP9999", "Ghost", 20, 30, 0],
    ["EMP1002", "Ravi", 25, 30, 0],
]

EMPLOYEE_ROW = {
    "Employee ID": "EMP2001",
    "Full Name": "Meena Iyer",
    "Date of Joining": 44941,
    "Department": "Quality",
    "Designation": "Inspector",
    "Gender": "female",
    "Fixed Stipend": "₹18,000",
    "Father's Name": "K Iyer",
    "Permanent Address": "4 Lake View, Chennai",
    "Communication Address": "4 Lake View, Chennai",
    "Contact Number": 9876543210.0,
    "Emergency Contact": "9123456780",
    "Qualification": "Diploma",
    "Blood Group": "B+",
    "Aadhar Number": "123456789012",
    "PAN Number": "abcde1234f",
    "Bank Name": "Canara Bank",
    "Account Number": "556677889900",
    "IFSC Code": "CNRB0001234",
    "Branch": "Adyar",
    "Category": "regular",
    "Date of Birth": "20/05/1990",
    "Salary Type": "Salary",
    "Employee Category": "NATS",
    "Shoe Size": 9,
}


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def templates() -> TemplateRegistry:
    return TemplateRegistry(MemoryTemplateStore())


@pytest.fixture
def benefits() -> MemoryBenefitSource:
    source = MemoryBenefitSource()
    source.put(COMPANY, Benefit(title="Uniform", amount=Decimal("200")))
    return source


def _payrun_service(settings, templates, directory, benefits, payruns=None) -> PayrunImportService:
    return PayrunImportService(
        settings=settings,
        templates=templates,
        directory=directory,
        payruns=payruns if payruns is not None else MemoryPayrunStore(),
        benefits=benefits,
    )


class TestPayrunImport:
    def test_accepted_rows_are_calculated_and_saved(self, settings, templates, directory, benefits):
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)

        summary = service.import_grid(COMPANY, "mar", 2024, PAYRUN_GRID)

        assert [r.employee_id for r in summary.success] == ["EMP1001", "EMP1002"]
        assert [e.source_row_number for e in summary.errors] == [3]
        first = summary.success[0].payrun
        assert first is not None
        assert first.month == "March"
        assert first.transport == Decimal("150.00")
        assert first.benefit_deductions == Decimal("200")
        stored = payruns.list_period(COMPANY, "March", 2024)
        assert {p.employee_id for p in stored} == {"EMP1001", "EMP1002"}

    def test_existing_period_is_refused(self, settings, templates, directory, benefits):
        service = _payrun_service(settings, templates, directory, benefits)
        service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)
        with pytest.raises(PayrunPeriodExistsError, match="Data already exists for March 2024"):
            service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)

    def test_overwrite_replaces_period(self, settings, templates, directory, benefits):
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)
        service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)
        grid = [PAYRUN_GRID[0], ["EMP1001", "Asha", 10, 30, 0]]

        service.import_grid(COMPANY, "March", 2024, grid, overwrite=True)

        stored = payruns.list_period(COMPANY, "March", 2024)
        assert [p.employee_id for p in stored] == ["EMP1001"]
        assert stored[0].present_days == Decimal("10")
        assert service.period_summary(COMPANY, "March", 2024).total_employees == 1

    def test_aborted_overwrite_keeps_stored_period(self, settings, templates, directory, benefits):
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)
        service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)

        with pytest.raises(ImportAbortedError):
            service.import_grid(COMPANY, "March", 2024, [PAYRUN_GRID[0]], overwrite=True)

        assert len(payruns.list_period(COMPANY, "March", 2024)) == 2

    def test_oversized_amount_is_rejected_and_batch_continues(self, settings, templates, directory, benefits):
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)
        grid = [PAYRUN_GRID[0], ["EMP1001", "Asha", 20, 30, 100], ["EMP1002", "Ravi", 20, 30, "1e30"]]

        summary = service.import_grid(COMPANY, "March", 2024, grid)

        assert [r.employee_id for r in summary.success] == ["EMP1001"]
        assert summary.errors[0].source_row_number == 3
        assert summary.errors[0].violations[0].code == ViolationCode.FIELD_OUT_OF_RANGE
        assert [p.employee_id for p in payruns.list_period(COMPANY, "March", 2024)] == ["EMP1001"]

    def test_calculation_overflow_becomes_row_error(self, settings, templates, benefits):
        directory = MemoryEmployeeDirectory([
            make_employee("EMP1001"),
            make_employee("EMP1002", fixed_stipend=Decimal("1e30")),
        ])
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)
        grid = [PAYRUN_GRID[0], ["EMP1001", "Asha", 20, 30, 0], ["EMP1002", "Ravi", 20, 30, 0]]

        summary = service.import_grid(COMPANY, "March", 2024, grid)

        assert [r.employee_id for r in summary.success] == ["EMP1001"]
        error = summary.errors[0]
        assert error.source_row_number == 3
        assert error.violations[0].code == ViolationCode.FIELD_OUT_OF_RANGE
        assert error.messages == ["Row 3: amounts are too large to calculate a payrun"]
        assert summary.total_processed == 2

    def test_accepted_row_without_directory_match_is_rejected(
        self, settings, templates, directory, benefits, monkeypatch,
    ):
        payruns = MemoryPayrunStore()
        service = _payrun_service(settings, templates, directory, benefits, payruns)
        orphan = ReconciledRow(employee_id="EMP1001", fields={"presentDays": Decimal("20")}, source_row_number=2)
        monkeypatch.setattr(service, "reconcile", lambda company_id, grid: ImportSummary(success=[orphan]))

        summary = service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)

        assert summary.success == []
        assert summary.errors[0].violations[0].code == ViolationCode.EMPLOYEE_NOT_FOUND
        assert payruns.list_period(COMPANY, "March", 2024) == []

    def test_persistence_failure_becomes_row_error(self, settings, templates, directory, benefits):
        payruns = MemoryPayrunStore(fail_on=["EMP1001"])
        service = _payrun_service(settings, templates, directory, benefits, payruns)

        summary = service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)

        assert [r.employee_id for r in summary.success] == ["EMP1002"]
        assert [e.source_row_number for e in summary.errors] == [2, 3]
        assert summary.errors[0].violations[0].code == ViolationCode.PERSISTENCE_FAILURE
        assert summary.total_processed == 3

    def test_unknown_month_aborts(self, settings, templates, directory, benefits):
        service = _payrun_service(settings, templates, directory, benefits)
        with pytest.raises(ImportAbortedError):
            service.import_grid(COMPANY, "Smarch", 2024, PAYRUN_GRID)

    def test_period_summary(self, settings, templates, directory, benefits):
        service = _payrun_service(settings, templates, directory, benefits)
        summary = service.import_grid(COMPANY, "March", 2024, PAYRUN_GRID)

        period = service.period_summary(COMPANY, "3", 2024)

        assert period.month == "March"
        assert period.total_employees == 2
        expected = sum(r.payrun.final_netpay for r in summary.success) - Decimal("400")
        assert period.total_salary == expected


class TestEmployeeImport:
    @pytest.fixture
    def service(self, settings, templates, directory) -> EmployeeImportService:
        columns = add_custom_column(templates.load(COMPANY, ImportDomain.EMPLOYEE), "Shoe Size")
        templates.save(COMPANY, ImportDomain.EMPLOYEE, columns)
        return EmployeeImportService(settings=settings, templates=templates, directory=directory)

    def test_creates_employee_records(self, service, directory):
        grid = [list(EMPLOYEE_ROW), list(EMPLOYEE_ROW.values())]

        summary = service.import_grid(COMPANY, grid)

        assert summary.errors == []
        created = directory.lookup_by_business_id(COMPANY, "emp2001")
        assert created is not None
        assert created.name == "Meena Iyer"
        assert created.date_of_joining == date(2023, 1, 15)
        assert created.date_of_birth == date(1990, 5, 20)
        assert created.fixed_stipend == Decimal("18000")
        assert created.gender == "Female"
        assert created.category == "Regular"
        assert created.pan_number == "ABCDE1234F"
        assert created.contact_number == "9876543210"
        assert created.custom_fields == {"Shoe Size": "9"}
        assert summary.success[0].employee == created

    def test_existing_and_invalid_rows_are_reported(self, service, directory):
        existing = {**EMPLOYEE_ROW, "Employee ID": "EMP1001"}
        bad_pan = {**EMPLOYEE_ROW, "Employee ID": "EMP2002", "PAN Number": "12345"}
        grid = [list(EMPLOYEE_ROW), list(existing.values()), list(bad_pan.values()), list(EMPLOYEE_ROW.values())]

        summary = service.import_grid(COMPANY, grid)

        assert [r.employee_id for r in summary.success] == ["EMP2001"]
        assert summary.errors[0].violations[0].code == ViolationCode.DUPLICATE_EMPLOYEE
        assert summary.errors[1].violations[0].code == ViolationCode.FIELD_PATTERN_INVALID
        assert directory.lookup_by_business_id(COMPANY, "EMP2002") is None


def test_build_employee_maps_template_keys():
    columns = add_custom_column(get_default_template(ImportDomain.EMPLOYEE), "Locker")
    row = ReconciledRow(
        employee_id="EMP7",
        fields={"name": "Kiran", "DOB": "1995-01-01", "custom_locker": Decimal("12")},
        source_row_number=2,
    )
    employee = build_employee(COMPANY, row, columns)
    assert employee.employee_id == "EMP7"
    assert employee.company_id == COMPANY
    assert employee.date_of_birth == date(1995, 1, 1)
    assert employee.custom_fields == {"Locker": "12"}
    assert employee.id
