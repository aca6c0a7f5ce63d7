"""Reports service — fetch a company snapshot and run the aggregator on it.

Nothing is cached: each call reads the current employees and attendance
and recomputes. Service methods take calendar months (1-12) and hand the
calculator its 0-based index.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.attendance.service import fetch_records
from workforce.auth.dependencies import RequestContext
from workforce.common.audit import create_audit_entry
from workforce.common.constants import EmployeeStatus
from workforce.companies.models import Owner, Supervisor
from workforce.employees.models import Employee, PayHistory
from workforce.employees.service import EmployeeService, scoped_employees
from workforce.reports.calculator import (
    build_ledger,
    compute_totals,
    days_in_month,
    generate_report,
    period_bounds,
)
from workforce.reports.schemas import (
    FinalizeResponse,
    LedgerEntry,
    MonthlyReportResponse,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _to_money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


class ReportService:
    """Monthly wage reports, detailed ledgers and pay finalisation."""

    @staticmethod
    async def monthly_report(
        db: AsyncSession,
        ctx: RequestContext,
        month: int,
        year: int,
    ) -> MonthlyReportResponse:
        employees = await EmployeeService.list_all(db, ctx, status=EmployeeStatus.active)
        index = month - 1
        start, end = period_bounds(year, index)
        records = await fetch_records(db, (e.id for e in employees), start, end)

        rows = generate_report(employees, records, index, year)
        return MonthlyReportResponse(
            month=month,
            year=year,
            total_days=days_in_month(year, index),
            rows=rows,
            totals=compute_totals(rows),
        )

    @staticmethod
    async def _marker_names(
        db: AsyncSession,
        company_id: uuid.UUID,
    ) -> dict[uuid.UUID, str]:
        names: dict[uuid.UUID, str] = {}
        owners = await db.execute(
            select(Owner.id, Owner.full_name).where(Owner.company_id == company_id)
        )
        for owner_id, name in owners.all():
            names[owner_id] = name
        supervisors = await db.execute(
            select(Supervisor.id, Supervisor.full_name).where(Supervisor.company_id == company_id)
        )
        for supervisor_id, name in supervisors.all():
            names[supervisor_id] = name
        return names

    @staticmethod
    async def ledger(
        db: AsyncSession,
        ctx: RequestContext,
        month: int,
        year: int,
    ) -> list[LedgerEntry]:
        """Day-by-day wage lines with running totals per employee."""
        employees = await EmployeeService.list_all(db, ctx, status=EmployeeStatus.active)
        start, end = period_bounds(year, month - 1)
        records = await fetch_records(db, (e.id for e in employees), start, end)
        return build_ledger(
            employees,
            records,
            month - 1,
            year,
            marked_by_names=await ReportService._marker_names(db, ctx.company_id),
            company_name=ctx.company.name if ctx.company else "",
        )

    # ── Pay history ───────────────────────────────────────────────────

    @staticmethod
    async def finalize_month(
        db: AsyncSession,
        ctx: RequestContext,
        month: int,
        year: int,
    ) -> FinalizeResponse:
        """Snapshot the month's report into ``pay_history``.

        Finalising the same month again replaces the earlier snapshot.
        """
        report = await ReportService.monthly_report(db, ctx, month, year)
        period_start = date(year, month, 1)

        await db.execute(
            delete(PayHistory).where(
                PayHistory.company_id == ctx.company_id,
                PayHistory.month == period_start,
            )
        )
        for row in report.rows:
            db.add(
                PayHistory(
                    employee_id=row.employee_id,
                    company_id=ctx.company_id,
                    month=period_start,
                    present_days=row.present_days,
                    absent_days=row.absent_days,
                    base_pay=_to_money(row.calculated_wage),
                    deductions=_to_money(row.deductions),
                    final_pay=_to_money(row.final_pay),
                    finalized_by=ctx.actor_id,
                )
            )
        await db.flush()

        await create_audit_entry(
            db,
            action="finalize",
            entity_type="pay_history",
            entity_id=ctx.company_id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            new_values={
                "month": period_start.isoformat(),
                "employees": len(report.rows),
                "final_pay": round(report.totals.final_pay, 2),
            },
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info(
            "Pay for %04d-%02d finalised for company %s (%d employees)",
            year, month, ctx.company_id, len(report.rows),
        )
        return FinalizeResponse(
            month=month,
            year=year,
            employees_finalized=len(report.rows),
            totals=report.totals,
        )

    @staticmethod
    async def pay_history(
        db: AsyncSession,
        ctx: RequestContext,
        month: int,
        year: int,
    ) -> list[PayHistory]:
        visible = scoped_employees(ctx).with_only_columns(Employee.id)
        result = await db.execute(
            select(PayHistory)
            .where(
                PayHistory.company_id == ctx.company_id,
                PayHistory.month == date(year, month, 1),
                PayHistory.employee_id.in_(visible),
            )
        )
        return list(result.scalars().all())
