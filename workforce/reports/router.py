"""Reports router — monthly wage report (JSON / CSV / PDF), detailed ledger,
pay finalisation and pay history.
"""


from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.auth.dependencies import RequestContext, require_company_permission
from workforce.common.constants import MONTH_NAMES
from workforce.common.rate_limit import EXPORT_LIMIT, limiter
from workforce.database import get_db
from workforce.reports.exporters import (
    attendance_ledger_csv,
    monthly_report_csv,
    monthly_report_pdf,
)
from workforce.reports.schemas import PayHistoryResponse
from workforce.reports.service import ReportService

router = APIRouter()

_read = require_company_permission("report:read")
_finalize = require_company_permission("report:finalize")


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _slug(month: int, year: int) -> str:
    return f"{MONTH_NAMES[month - 1]}-{year}"


# ── GET /reports/monthly ─────────────────────────────────────────────

@router.get("/monthly")
async def monthly_report(
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    """Per-employee attendance counts and pay, with totals."""
    report = await ReportService.monthly_report(db, ctx, month, year)
    return {"data": report.model_dump(mode="json")}


@router.get("/monthly/csv")
@limiter.limit(EXPORT_LIMIT)
async def monthly_report_csv_export(
    request: Request,
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    report = await ReportService.monthly_report(db, ctx, month, year)
    return _download(
        monthly_report_csv(report.rows),
        "text/csv",
        f"monthly-report-{_slug(month, year)}.csv",
    )


@router.get("/monthly/pdf")
@limiter.limit(EXPORT_LIMIT)
async def monthly_report_pdf_export(
    request: Request,
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    report = await ReportService.monthly_report(db, ctx, month, year)
    pdf = monthly_report_pdf(
        report.rows, report.totals, month, year,
        company_name=ctx.company.name if ctx.company else "",
    )
    return _download(pdf, "application/pdf", f"monthly-report-{_slug(month, year)}.pdf")


# ── GET /reports/ledger/csv — one line per employee per day ─────────

@router.get("/ledger/csv")
@limiter.limit(EXPORT_LIMIT)
async def ledger_csv_export(
    request: Request,
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    entries = await ReportService.ledger(db, ctx, month, year)
    return _download(
        attendance_ledger_csv(entries),
        "text/csv",
        f"attendance-ledger-{_slug(month, year)}.csv",
    )


# ── POST /reports/monthly/finalize — owner only ─────────────────────

@router.post("/monthly/finalize")
async def finalize_month(
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_finalize),
):
    """Store the month's report as pay history, replacing any earlier run."""
    result = await ReportService.finalize_month(db, ctx, month, year)
    return {
        "data": result.model_dump(mode="json"),
        "message": f"Pay finalised for {result.employees_finalized} employees.",
    }


@router.get("/pay-history")
async def pay_history(
    month: int = Query(..., ge=1, le=12, description="Month, 1 = January"),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_read),
):
    rows = await ReportService.pay_history(db, ctx, month, year)
    return {"data": [PayHistoryResponse.model_validate(r).model_dump(mode="json") for r in rows]}
