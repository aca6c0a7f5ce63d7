"""Attendance service layer — daily marking and monthly history.

Saving a day is a full replacement: every record for that date belonging
to the caller's visible employees is deleted and the submitted marks are
inserted in the same transaction. Work hours are computed once here and
stored; reports read the stored value.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.attendance.models import AttendanceRecord
from workforce.attendance.schemas import (
    AttendanceDayResponse,
    AttendanceEntry,
    AttendanceHistoryResponse,
    AttendanceRecordResponse,
    AttendanceSummary,
)
from workforce.attendance.work_hours import compute_work_hours
from workforce.auth.dependencies import RequestContext
from workforce.common.audit import create_audit_entry
from workforce.common.constants import AttendanceStatus, EmployeeStatus
from workforce.common.exceptions import NotFoundException, ValidationException
from workforce.employees.models import Employee
from workforce.employees.service import EmployeeService, scoped_employees
from workforce.reports.calculator import days_in_month, period_bounds

logger = logging.getLogger(__name__)


async def fetch_records(
    db: AsyncSession,
    employee_ids: Iterable[uuid.UUID],
    start: date,
    end: date,
) -> list[AttendanceRecord]:
    """Attendance of *employee_ids* between *start* and *end* inclusive."""
    ids = list(employee_ids)
    if not ids:
        return []
    result = await db.execute(
        select(AttendanceRecord)
        .where(
            AttendanceRecord.employee_id.in_(ids),
            AttendanceRecord.date >= start,
            AttendanceRecord.date <= end,
        )
        .order_by(AttendanceRecord.date)
    )
    return list(result.scalars().all())


def summarise(
    employee: Employee,
    records: Sequence[AttendanceRecord],
) -> AttendanceSummary:
    days = {r.date.day: r.status for r in records}
    present = sum(1 for s in days.values() if s == AttendanceStatus.present)
    absent = sum(1 for s in days.values() if s == AttendanceStatus.absent)
    total = present + absent
    return AttendanceSummary(
        employee_id=employee.id,
        full_name=employee.full_name,
        mobile=employee.mobile,
        days=days,
        present_days=present,
        absent_days=absent,
        total_days=total,
        attendance_percentage=(present / total * 100) if total else 0.0,
    )


class AttendanceService:
    """Business logic for marking and reviewing attendance."""

    # ── One day ───────────────────────────────────────────────────────

    @staticmethod
    async def get_day(
        db: AsyncSession,
        ctx: RequestContext,
        day: date,
    ) -> AttendanceDayResponse:
        """The day's records for active visible employees, plus counts."""
        employees = await EmployeeService.list_all(db, ctx, status=EmployeeStatus.active)
        records = await fetch_records(db, (e.id for e in employees), day, day)
        present = sum(1 for r in records if r.status == AttendanceStatus.present)
        absent = sum(1 for r in records if r.status == AttendanceStatus.absent)
        return AttendanceDayResponse(
            date=day,
            records=[AttendanceRecordResponse.model_validate(r) for r in records],
            present=present,
            absent=absent,
            unmarked=len(employees) - len(records),
        )

    @staticmethod
    async def save_day(
        db: AsyncSession,
        ctx: RequestContext,
        day: date,
        entries: Sequence[AttendanceEntry],
    ) -> list[AttendanceRecord]:
        """Replace the day's attendance for the caller's employees."""
        seen: set[uuid.UUID] = set()
        for entry in entries:
            if entry.employee_id in seen:
                raise ValidationException(
                    {"entries": [f"Employee {entry.employee_id} is listed more than once."]},
                )
            seen.add(entry.employee_id)

        visible_ids = set(
            (
                await db.execute(
                    scoped_employees(ctx).with_only_columns(Employee.id)
                )
            ).scalars().all()
        )
        unknown = seen - visible_ids
        if unknown:
            raise NotFoundException("Employee", str(sorted(unknown, key=str)[0]))

        await db.execute(
            delete(AttendanceRecord).where(
                AttendanceRecord.date == day,
                AttendanceRecord.employee_id.in_(visible_ids),
            )
        )

        records: list[AttendanceRecord] = []
        for entry in entries:
            present = entry.status == AttendanceStatus.present
            in_time = entry.in_time if present else None
            out_time = entry.out_time if present else None
            hours = compute_work_hours(in_time, out_time) if present else None
            record = AttendanceRecord(
                employee_id=entry.employee_id,
                company_id=ctx.company_id,
                date=day,
                status=entry.status,
                in_time=in_time,
                out_time=out_time,
                work_hours=Decimal(str(hours)) if hours is not None else None,
                marked_by_owner_id=ctx.owner_id if ctx.is_owner else None,
                marked_by_supervisor_id=ctx.supervisor_id if ctx.is_supervisor else None,
            )
            db.add(record)
            records.append(record)
        await db.flush()

        await create_audit_entry(
            db,
            action="replace",
            entity_type="attendance_day",
            entity_id=ctx.company_id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            new_values={
                "date": day.isoformat(),
                "present": sum(1 for r in records if r.status == AttendanceStatus.present),
                "absent": sum(1 for r in records if r.status == AttendanceStatus.absent),
            },
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info(
            "Attendance for %s saved by %s %s: %d records",
            day, ctx.role.value, ctx.actor_id, len(records),
        )
        return records

    # ── Monthly history ───────────────────────────────────────────────

    @staticmethod
    async def monthly_history(
        db: AsyncSession,
        ctx: RequestContext,
        month: int,
        year: int,
        *,
        employee_id: Optional[uuid.UUID] = None,
    ) -> AttendanceHistoryResponse:
        if employee_id is not None:
            employees = [await EmployeeService.get_employee(db, ctx, employee_id)]
        else:
            employees = await EmployeeService.list_all(db, ctx, status=EmployeeStatus.active)

        start, end = period_bounds(year, month - 1)
        records = await fetch_records(db, (e.id for e in employees), start, end)
        by_employee: dict[uuid.UUID, list[AttendanceRecord]] = {}
        for record in records:
            by_employee.setdefault(record.employee_id, []).append(record)

        return AttendanceHistoryResponse(
            month=month,
            year=year,
            days_in_month=days_in_month(year, month - 1),
            employees=[summarise(e, by_employee.get(e.id, [])) for e in employees],
        )
