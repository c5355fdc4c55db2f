"""PayrunImportService: reconcile a monthly attendance sheet, calculate and store payruns."""

from __future__ import annotations

import logging

from paydesk.core.config import AppSettings
from paydesk.core.exceptions import ImportAbortedError, PayrunPeriodExistsError, PersistenceError
from paydesk.core.protocols import IBenefitSource, IEmployeeDirectory, IPayrunStore
from paydesk.core.types import Grid
from paydesk.importing.templates import TemplateRegistry
from paydesk.models.import_result import ImportSummary, ReconciledRow, ViolationCode
from paydesk.models.payrun import PayrunPeriodSummary
from paydesk.models.template import ImportDomain
from paydesk.payrun.calculator import PayrunCalculator, month_name
from paydesk.payrun.summary import summarize_period
from paydesk.services.base import BaseImportService

logger = logging.getLogger(__name__)


class PayrunImportService(BaseImportService):
    domain = ImportDomain.PAYRUN

    def __init__(
        self,
        *,
        settings: AppSettings,
        templates: TemplateRegistry,
        directory: IEmployeeDirectory,
        payruns: IPayrunStore,
        benefits: IBenefitSource,
    ) -> None:
        super().__init__(settings=settings, templates=templates, directory=directory)
        self._payruns = payruns
        self._benefits = benefits
        self._calculator = PayrunCalculator(settings.payrun)

    def import_grid(
        self,
        company_id: str,
        month: str,
        year: int,
        grid: Grid,
        *,
        overwrite: bool = False,
    ) -> ImportSummary:
        """Run one upload end to end.

        Accepted rows are calculated and saved one at a time, in file order.
        A calculation or save failure turns that row into an error entry; rows
        saved before it stay saved. With ``overwrite`` the stored period is
        cleared once reconciliation has succeeded, so the upload replaces it.
        """
        try:
            month = month_name(month)
        except ValueError as exc:
            raise ImportAbortedError(str(exc), company_id) from exc
        if not overwrite and self._payruns.has_period(company_id, month, year):
            raise PayrunPeriodExistsError(company_id, month, year)

        benefits = self._benefits.list(company_id)
        summary = self.reconcile(company_id, grid)
        if overwrite:
            cleared = self._payruns.clear_period(company_id, month, year)
            logger.info("Overwriting %s %d for company %s: %d payruns cleared", month, year, company_id, cleared)

        accepted: list[ReconciledRow] = []
        for row in summary.success:
            if row.employee is None:
                summary.errors.append(self.row_failure(
                    row, ViolationCode.EMPLOYEE_NOT_FOUND, f"Employee with ID {row.employee_id} not found",
                ))
                continue
            try:
                result = self._calculator.calculate(row, row.employee, benefits, month=month, year=year)
            except ArithmeticError as exc:
                logger.warning("Row %d (%s) could not be calculated: %r", row.source_row_number, row.employee_id, exc)
                summary.errors.append(self.row_failure(
                    row, ViolationCode.FIELD_OUT_OF_RANGE, "amounts are too large to calculate a payrun",
                ))
                continue
            try:
                self._payruns.save(company_id, result)
            except PersistenceError as exc:
                summary.errors.append(self.persistence_failure(row, exc))
                continue
            accepted.append(row.model_copy(update={"payrun": result}))

        summary.success = accepted
        summary.errors.sort(key=lambda e: e.source_row_number)
        logger.info(
            "Payrun import %s %d for company %s: %d saved, %d errors",
            month, year, company_id, len(summary.success), len(summary.errors),
        )
        return summary

    def period_summary(self, company_id: str, month: str, year: int) -> PayrunPeriodSummary:
        month = month_name(month)
        results = self._payruns.list_period(company_id, month, year)
        return summarize_period(month, year, results, self._benefits.list(company_id))
