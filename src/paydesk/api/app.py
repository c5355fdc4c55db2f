"""FastAPI application with lifespan, router mounting and error mapping."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from paydesk.api.routes import employees, health, payruns, templates
from paydesk.core.config import AppSettings
from paydesk.core.exceptions import (
    DuplicateKeyError,
    ImportAbortedError,
    PayrunPeriodExistsError,
    PaydeskError,
    ProtectedFieldError,
    TemplateError,
    UnknownColumnError,
)
from paydesk.core.log import configure_logging
from paydesk.importing.templates import TemplateRegistry
from paydesk.persistence import Persistence, create_persistence
from paydesk.services.employee_import import EmployeeImportService
from paydesk.services.payrun_import import PayrunImportService

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[PaydeskError], int], ...] = (
    (ImportAbortedError, 422),
    (PayrunPeriodExistsError, 409),
    (DuplicateKeyError, 409),
    (ProtectedFieldError, 409),
    (UnknownColumnError, 404),
    (TemplateError, 400),
)


def status_for(exc: PaydeskError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


async def _paydesk_error_handler(request: Request, exc: PaydeskError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings: AppSettings = getattr(app.state, "settings", None) or AppSettings()
    configure_logging(settings.log_level)
    app.state.settings = settings

    persistence: Persistence = getattr(app.state, "persistence", None) or create_persistence(settings)
    app.state.persistence = persistence
    app.state.templates = TemplateRegistry(persistence.templates)
    app.state.payrun_import = PayrunImportService(
        settings=settings,
        templates=app.state.templates,
        directory=persistence.directory,
        payruns=persistence.payruns,
        benefits=persistence.benefits,
    )
    app.state.employee_import = EmployeeImportService(
        settings=settings,
        templates=app.state.templates,
        directory=persistence.directory,
    )
    logger.info("Paydesk API started (environment=%s)", settings.environment)
    yield


def create_app(persistence: Persistence | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Passing ``persistence`` skips building the DynamoDB/Redis backends at startup.
    """
    app = FastAPI(
        title="Paydesk Payrun Import Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.persistence = persistence
    app.state.settings = settings
    app.add_exception_handler(PaydeskError, _paydesk_error_handler)
    app.include_router(health.router)
    app.include_router(templates.router, prefix="/companies/{company_id}/templates")
    app.include_router(payruns.router, prefix="/companies/{company_id}/payruns")
    app.include_router(employees.router, prefix="/companies/{company_id}/employees")
    return app
