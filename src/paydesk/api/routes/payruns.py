"""Payrun import and period summary endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from paydesk.core.types import Grid
from paydesk.models.import_result import ImportSummary
from paydesk.models.payrun import PayrunPeriodSummary
from paydesk.services.payrun_import import PayrunImportService

router = APIRouter(tags=["payruns"])


class PayrunImportBody(BaseModel):
    month: str
    year: int = Field(ge=1900, le=9999)
    grid: Grid
    overwrite: bool = False


def _service(request: Request) -> PayrunImportService:
    return request.app.state.payrun_import


@router.post("/import")
def import_payruns(company_id: str, body: PayrunImportBody, request: Request) -> ImportSummary:
    return _service(request).import_grid(
        company_id, body.month, body.year, body.grid, overwrite=body.overwrite,
    )


@router.get("/{year}/{month}/summary")
def period_summary(company_id: str, year: int, month: str, request: Request) -> PayrunPeriodSummary:
    try:
        return _service(request).period_summary(company_id, month, year)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
