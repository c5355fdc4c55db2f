"""Employee bulk import endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from paydesk.core.types import Grid
from paydesk.models.import_result import ImportSummary

router = APIRouter(tags=["employees"])


class EmployeeImportBody(BaseModel):
    grid: Grid


@router.post("/import")
def import_employees(company_id: str, body: EmployeeImportBody, request: Request) -> ImportSummary:
    return request.app.state.employee_import.import_grid(company_id, body.grid)
