"""Base import service with common dependency wiring."""

from __future__ import annotations

import logging

from paydesk.core.config import AppSettings
from paydesk.core.protocols import IEmployeeDirectory
from paydesk.core.types import Grid
from paydesk.importing.reconciler import BatchReconciler
from paydesk.importing.templates import TemplateRegistry
from paydesk.importing.validator import RowValidator
from paydesk.models.import_result import FieldViolation, ImportRowError, ImportSummary, ReconciledRow, ViolationCode
from paydesk.models.template import ImportDomain, TemplateColumn

logger = logging.getLogger(__name__)


class BaseImportService:
    """Common base for the employee and payrun import flows.

    Settings, the template registry and the employee directory are injected
    at construction time; subclasses add their own stores.
    """

    domain: ImportDomain

    def __init__(
        self,
        *,
        settings: AppSettings,
        templates: TemplateRegistry,
        directory: IEmployeeDirectory,
    ) -> None:
        self._settings = settings
        self._templates = templates
        self._directory = directory

    def load_template(self, company_id: str) -> list[TemplateColumn]:
        return self._templates.load(company_id, self.domain)

    def reconcile(
        self,
        company_id: str,
        grid: Grid,
        template: list[TemplateColumn] | None = None,
    ) -> ImportSummary:
        if template is None:
            template = self.load_template(company_id)
        reconciler = BatchReconciler(
            self._directory,
            domain=self.domain,
            validator=RowValidator(self._settings.importing),
        )
        return reconciler.reconcile(grid, template, company_id)

    @staticmethod
    def row_failure(row: ReconciledRow, code: ViolationCode, problem: str) -> ImportRowError:
        """Reject an already-accepted row after reconciliation."""
        return ImportRowError(
            source_row_number=row.source_row_number,
            employee_id=row.employee_id,
            violations=[FieldViolation(
                key="",
                code=code,
                message=f"Row {row.source_row_number}: {problem}",
            )],
        )

    @classmethod
    def persistence_failure(cls, row: ReconciledRow, exc: Exception) -> ImportRowError:
        logger.warning("Row %d (%s) failed to persist: %s", row.source_row_number, row.employee_id, exc)
        return cls.row_failure(row, ViolationCode.PERSISTENCE_FAILURE, f"could not be saved ({exc})")
