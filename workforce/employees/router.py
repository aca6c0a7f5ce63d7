"""Employees router — CRUD, history, import and export.

Routes:
    /employees                  — List (active / inactive tab, search), create
    /employees/export           — Employee roster as CSV
    /employees/import           — Bulk import from .xlsx / .csv
    /employees/import/template  — Sample .xlsx for the import
    /employees/{id}             — Get, update, delete
    /employees/{id}/history     — Attendance and pay history
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.auth.dependencies import RequestContext, require_company_permission
from workforce.common.constants import EmployeeStatus, EmploymentType
from workforce.common.exceptions import ValidationException
from workforce.common.pagination import PaginationParams
from workforce.common.rate_limit import EXPORT_LIMIT, IMPORT_LIMIT, limiter
from workforce.config import settings
from workforce.database import get_db
from workforce.employees import importer
from workforce.employees.schemas import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from workforce.employees.service import EmployeeService
from workforce.reports.exporters import employees_csv

router = APIRouter()

_read = require_company_permission("employee:read")
_write = require_company_permission("employee:write")


# ── GET /employees — List employees ─────────────────────────────────

@router.get("")
async def list_employees(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
    pagination: PaginationParams = Depends(),
    status: Optional[EmployeeStatus] = Query(None, description="active or inactive"),
    employment_type: Optional[EmploymentType] = Query(None, description="FIXED or DAILY"),
    supervisor_id: Optional[uuid.UUID] = Query(None),
    joined_from: Optional[date] = Query(None, description="Join date >= (YYYY-MM-DD)"),
    joined_to: Optional[date] = Query(None, description="Join date <= (YYYY-MM-DD)"),
    search: Optional[str] = Query(None, description="Search by name or mobile"),
):
    """List employees visible to the caller. Supervisors see their own team only."""
    filters = {
        "status": status,
        "employment_type": employment_type,
        "supervisor_id": supervisor_id,
        "join_date__from": joined_from,
        "join_date__to": joined_to,
    }
    result = await EmployeeService.list_employees(
        db, ctx, pagination, filters=filters, search=search,
    )
    return {
        "data": [EmployeeResponse.model_validate(e).model_dump(mode="json") for e in result.data],
        "meta": result.meta.model_dump(),
    }


# ── POST /employees — Create employee ──────────────────────────────

@router.post("", status_code=201)
async def create_employee(
    body: EmployeeCreate = Body(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_write),
):
    employee = await EmployeeService.create_employee(db, ctx, body)
    return {
        "data": EmployeeResponse.model_validate(employee).model_dump(mode="json"),
        "message": "Employee created successfully.",
    }


# ── GET /employees/export — CSV roster ─────────────────────────────
# NOTE: static paths are declared before /{employee_id}.

@router.get("/export")
@limiter.limit(EXPORT_LIMIT)
async def export_employees(
    request: Request,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
    status: Optional[EmployeeStatus] = Query(EmployeeStatus.active),
):
    employees = await EmployeeService.list_all(db, ctx, status=status)
    return Response(
        content=employees_csv(employees),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="employees.csv"'},
    )


# ── GET /employees/import/template — sample workbook ───────────────

@router.get("/import/template")
async def import_template(
    ctx: RequestContext = Depends(require_company_permission("employee:import")),
):
    return Response(
        content=importer.build_template(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="employee_import_template.xlsx"'},
    )


# ── POST /employees/import — bulk import ───────────────────────────

@router.post("/import")
@limiter.limit(IMPORT_LIMIT)
async def import_employees(
    request: Request,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_company_permission("employee:import")),
):
    """Import employees from a spreadsheet.

    Invalid rows come back as ``{row, errors}``; rows whose mobile is
    already on file are skipped and only counted.
    """
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise ValidationException(
            {"file": [f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB limit."]},
        )
    result = await EmployeeService.import_employees(db, ctx, file.filename or "", content)
    return {
        "data": result.model_dump(mode="json"),
        "message": f"Imported {result.imported} employees.",
    }


# ── GET /employees/{id} ────────────────────────────────────────────

@router.get("/{employee_id}")
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    employee = await EmployeeService.get_employee(db, ctx, employee_id)
    return {"data": EmployeeResponse.model_validate(employee).model_dump(mode="json")}


# ── PUT /employees/{id} ────────────────────────────────────────────

@router.put("/{employee_id}")
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate = Body(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_write),
):
    employee = await EmployeeService.update_employee(db, ctx, employee_id, body)
    return {
        "data": EmployeeResponse.model_validate(employee).model_dump(mode="json"),
        "message": "Employee updated successfully.",
    }


# ── DELETE /employees/{id} ─────────────────────────────────────────

@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_write),
):
    await EmployeeService.delete_employee(db, ctx, employee_id)
    return Response(status_code=204)


# ── GET /employees/{id}/history ────────────────────────────────────

@router.get("/{employee_id}/history")
async def employee_history(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    history = await EmployeeService.get_history(db, ctx, employee_id)
    return {"data": history.model_dump(mode="json")}
