"""Dashboard service — counters and chart series for the landing page.

All methods are static async; counts are done with COUNT / GROUP BY in the
database. Supervisors only see numbers for their own employees.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.attendance.models import AttendanceRecord
from workforce.auth.dependencies import RequestContext
from workforce.common.constants import (
    TIMEZONE,
    AttendanceStatus,
    EmploymentType,
    SupervisorStatus,
)
from workforce.companies.models import Supervisor
from workforce.dashboard.schemas import (
    DailyAttendancePoint,
    DashboardSummaryResponse,
    EmployeeTypeBreakdown,
)
from workforce.employees.models import Employee
from workforce.employees.service import scoped_employees

TREND_DAYS = 7


def _today() -> date:
    """Current date in the company's timezone."""
    return datetime.now(ZoneInfo(TIMEZONE)).date()


class DashboardService:
    """Async dashboard aggregation queries."""

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        ctx: RequestContext,
        *,
        today: Optional[date] = None,
    ) -> DashboardSummaryResponse:
        today = today or _today()
        visible = scoped_employees(ctx).with_only_columns(Employee.id).subquery()

        # ── Employees by type ───────────────────────────────────────
        type_rows = await db.execute(
            select(Employee.employment_type, func.count())
            .where(Employee.id.in_(select(visible.c.id)))
            .group_by(Employee.employment_type)
        )
        by_type = {row[0]: row[1] for row in type_rows.all()}
        fixed = by_type.get(EmploymentType.fixed, 0)
        daily = by_type.get(EmploymentType.daily, 0)

        # ── Attendance, last 7 days including today ─────────────────
        start = today - timedelta(days=TREND_DAYS - 1)
        att_rows = await db.execute(
            select(AttendanceRecord.date, AttendanceRecord.status, func.count())
            .where(
                AttendanceRecord.employee_id.in_(select(visible.c.id)),
                AttendanceRecord.date >= start,
                AttendanceRecord.date <= today,
            )
            .group_by(AttendanceRecord.date, AttendanceRecord.status)
        )
        counts: dict[tuple[date, AttendanceStatus], int] = {
            (row[0], row[1]): row[2] for row in att_rows.all()
        }
        series = []
        for offset in range(TREND_DAYS):
            day = start + timedelta(days=offset)
            series.append(
                DailyAttendancePoint(
                    date=day,
                    present=counts.get((day, AttendanceStatus.present), 0),
                    absent=counts.get((day, AttendanceStatus.absent), 0),
                )
            )

        # ── Supervisors ─────────────────────────────────────────────
        active_supervisors = 0
        if ctx.is_owner:
            active_supervisors = (
                await db.execute(
                    select(func.count())
                    .select_from(Supervisor)
                    .where(
                        Supervisor.company_id == ctx.company_id,
                        Supervisor.status == SupervisorStatus.active,
                    )
                )
            ).scalar() or 0

        return DashboardSummaryResponse(
            total_employees=fixed + daily,
            present_today=series[-1].present,
            absent_today=series[-1].absent,
            active_supervisors=active_supervisors,
            employee_types=EmployeeTypeBreakdown(fixed=fixed, daily=daily),
            last_7_days=series,
        )
