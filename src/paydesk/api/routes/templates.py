"""Column template endpoints: view, save and edit per-company templates."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from paydesk.core.types import Grid
from paydesk.importing.templates import (
    TemplateRegistry,
    add_custom_column,
    add_system_column,
    build_template_sample,
    remove_column,
    rename_column,
)
from paydesk.models.template import ImportDomain, TemplateColumn

router = APIRouter(tags=["templates"])


class TemplateBody(BaseModel):
    columns: list[TemplateColumn]


class AddColumnBody(BaseModel):
    display_name: str = ""
    system_key: str | None = None  # re-add a removed default instead of a custom column


class RenameColumnBody(BaseModel):
    display_name: str


def _registry(request: Request) -> TemplateRegistry:
    return request.app.state.templates


@router.get("/{domain}")
def get_template(company_id: str, domain: ImportDomain, request: Request) -> TemplateBody:
    return TemplateBody(columns=_registry(request).load(company_id, domain))


@router.put("/{domain}")
def put_template(company_id: str, domain: ImportDomain, body: TemplateBody, request: Request) -> TemplateBody:
    _registry(request).save(company_id, domain, body.columns)
    return body


@router.post("/{domain}/columns", status_code=201)
def add_column(company_id: str, domain: ImportDomain, body: AddColumnBody, request: Request) -> TemplateBody:
    registry = _registry(request)
    columns = registry.load(company_id, domain)
    if body.system_key:
        columns = add_system_column(columns, domain, body.system_key)
    else:
        columns = add_custom_column(columns, body.display_name)
    registry.save(company_id, domain, columns)
    return TemplateBody(columns=columns)


@router.patch("/{domain}/columns/{key}")
def rename(company_id: str, domain: ImportDomain, key: str, body: RenameColumnBody,
           request: Request) -> TemplateBody:
    registry = _registry(request)
    columns = rename_column(registry.load(company_id, domain), key, body.display_name)
    registry.save(company_id, domain, columns)
    return TemplateBody(columns=columns)


@router.delete("/{domain}/columns/{key}")
def delete_column(company_id: str, domain: ImportDomain, key: str, request: Request) -> TemplateBody:
    registry = _registry(request)
    columns = remove_column(registry.load(company_id, domain), key)
    registry.save(company_id, domain, columns)
    return TemplateBody(columns=columns)


@router.get("/{domain}/sample")
def sample(company_id: str, domain: ImportDomain, request: Request) -> dict[str, Grid]:
    return {"rows": build_template_sample(_registry(request).load(company_id, domain))}
