"""Attendance router — daily marking, monthly history, history PDF."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.attendance.schemas import AttendanceDayRequest, AttendanceRecordResponse
from workforce.attendance.service import AttendanceService
from workforce.auth.dependencies import RequestContext, require_company_permission
from workforce.common.rate_limit import EXPORT_LIMIT, limiter
from workforce.database import get_db
from workforce.reports.exporters import attendance_history_pdf

router = APIRouter()

_read = require_company_permission("attendance:read")
_mark = require_company_permission("attendance:mark")


# ── GET /attendance/history — monthly grid ──────────────────────────

@router.get("/history")
async def attendance_history(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    employee_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    """Per-employee day grid with present / absent / attendance %."""
    history = await AttendanceService.monthly_history(
        db, ctx, month, year, employee_id=employee_id,
    )
    return {"data": history.model_dump(mode="json")}


# ── GET /attendance/history/pdf ─────────────────────────────────────

@router.get("/history/pdf")
@limiter.limit(EXPORT_LIMIT)
async def attendance_history_export(
    request: Request,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    employee_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    history = await AttendanceService.monthly_history(
        db, ctx, month, year, employee_id=employee_id,
    )
    pdf = attendance_history_pdf(
        history.employees, month, year,
        company_name=ctx.company.name if ctx.company else "",
    )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="attendance-{year}-{month:02d}.pdf"',
        },
    )


# ── GET /attendance/{date} ──────────────────────────────────────────

@router.get("/{day}")
async def get_attendance_day(
    day: date,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    result = await AttendanceService.get_day(db, ctx, day)
    return {"data": result.model_dump(mode="json")}


# ── PUT /attendance/{date} — replace the day's marks ────────────────

@router.put("/{day}")
async def save_attendance_day(
    day: date,
    body: AttendanceDayRequest,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_mark),
):
    """Replace attendance for *day*; previous marks for the caller's employees are dropped."""
    records = await AttendanceService.save_day(db, ctx, day, body.entries)
    return {
        "data": [AttendanceRecordResponse.model_validate(r).model_dump(mode="json") for r in records],
        "message": f"Attendance saved for {len(records)} employees.",
    }
