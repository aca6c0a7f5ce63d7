"""Employee service layer — async CRUD, history and bulk import.

Uses:
  - ``paginate()`` from workforce.common.pagination
  - ``apply_filters / apply_search`` from workforce.common.filters
  - ``create_audit_entry`` from workforce.common.audit
  - ``NotFoundException / ConflictError`` from workforce.common.exceptions

Every query goes through ``scoped_employees`` so a supervisor only ever
sees the employees assigned to them.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Union

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.attendance.models import AttendanceRecord
from workforce.auth.dependencies import RequestContext
from workforce.common.audit import create_audit_entry
from workforce.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    EmploymentType,
    SupervisorStatus,
)
from workforce.common.exceptions import ConflictError, NotFoundException, ValidationException
from workforce.common.filters import apply_filters, apply_search
from workforce.common.pagination import PaginatedResponse, PaginationParams, paginate
from workforce.companies.models import Supervisor
from workforce.employees import importer
from workforce.employees.models import Employee, PayHistory
from workforce.employees.schemas import (
    DailyEmployeeCreate,
    EmployeeHistoryResponse,
    EmployeeHistoryTotals,
    EmployeeResponse,
    FixedEmployeeCreate,
    ImportResult,
    ImportRowError,
)
from workforce.attendance.schemas import AttendanceRecordResponse
from workforce.reports.schemas import PayHistoryResponse

logger = logging.getLogger(__name__)

EmployeePayload = Union[FixedEmployeeCreate, DailyEmployeeCreate]


def scoped_employees(ctx: RequestContext) -> Select:
    """``SELECT employees`` restricted to what *ctx* may see."""
    query = select(Employee).where(Employee.company_id == ctx.company_id)
    if ctx.is_supervisor:
        query = query.where(Employee.supervisor_id == ctx.supervisor_id)
    return query


def _pay_fields(data: EmployeePayload) -> dict[str, Any]:
    """Column values for the pay part of a payload; the other rate is cleared."""
    if isinstance(data, FixedEmployeeCreate):
        return {
            "employment_type": EmploymentType.fixed,
            "monthly_salary": data.monthly_salary,
            "daily_rate": None,
        }
    return {
        "employment_type": EmploymentType.daily,
        "monthly_salary": None,
        "daily_rate": data.daily_rate,
    }


def _snapshot(employee: Employee) -> dict[str, Any]:
    return EmployeeResponse.model_validate(employee).model_dump(mode="json")


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── List (paginated, searchable) ────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        ctx: RequestContext,
        pagination: PaginationParams,
        *,
        filters: Optional[dict[str, Any]] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        """Return a paginated employee list for the active / inactive tabs.

        *filters* takes ``apply_filters`` keys, e.g. ``status`` or
        ``join_date__from``.
        """
        query = scoped_employees(ctx)
        if filters:
            query = apply_filters(query, Employee, filters)
        if search:
            query = apply_search(query, Employee, search, ["full_name", "mobile"])
        if not pagination.sort:
            query = query.order_by(Employee.full_name)
        return await paginate(db, query, pagination, model=Employee)

    @staticmethod
    async def list_all(
        db: AsyncSession,
        ctx: RequestContext,
        *,
        status: Optional[EmployeeStatus] = EmployeeStatus.active,
    ) -> list[Employee]:
        """Unpaginated list, ordered by name (reports and exports)."""
        query = scoped_employees(ctx)
        if status is not None:
            query = query.where(Employee.status == status)
        result = await db.execute(query.order_by(Employee.full_name))
        return list(result.scalars().all())

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        ctx: RequestContext,
        employee_id: uuid.UUID,
    ) -> Employee:
        result = await db.execute(
            scoped_employees(ctx).where(Employee.id == employee_id)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── Supervisor assignment ───────────────────────────────────────

    @staticmethod
    async def _resolve_supervisor(
        db: AsyncSession,
        ctx: RequestContext,
        requested: Optional[uuid.UUID],
    ) -> Optional[uuid.UUID]:
        """Supervisors always own what they create; owners may assign one."""
        if ctx.is_supervisor:
            return ctx.supervisor_id
        if requested is None:
            return None
        supervisor = await db.get(Supervisor, requested)
        if (
            supervisor is None
            or supervisor.company_id != ctx.company_id
            or supervisor.status != SupervisorStatus.active
        ):
            raise ValidationException(
                {"supervisor_id": ["Supervisor does not exist in this company or is inactive."]},
            )
        return supervisor.id

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        ctx: RequestContext,
        data: EmployeePayload,
    ) -> Employee:
        supervisor_id = await EmployeeService._resolve_supervisor(db, ctx, data.supervisor_id)
        fields = data.model_dump(exclude={"employment_type", "monthly_salary", "daily_rate", "supervisor_id"})

        employee = Employee(
            **fields,
            **_pay_fields(data),
            company_id=ctx.company_id,
            owner_id=ctx.owner_id,
            supervisor_id=supervisor_id,
        )
        db.add(employee)
        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            if "mobile" in str(exc.orig):
                raise ConflictError("mobile", data.mobile)
            raise
        await db.refresh(employee)

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            new_values=data.model_dump(mode="json"),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info("Employee %s created in company %s", employee.id, ctx.company_id)
        return employee

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        ctx: RequestContext,
        employee_id: uuid.UUID,
        data: EmployeePayload,
    ) -> Employee:
        employee = await EmployeeService.get_employee(db, ctx, employee_id)
        old_values = _snapshot(employee)

        fields = data.model_dump(exclude={"employment_type", "monthly_salary", "daily_rate", "supervisor_id"})
        fields.update(_pay_fields(data))
        if ctx.is_owner:
            fields["supervisor_id"] = await EmployeeService._resolve_supervisor(
                db, ctx, data.supervisor_id,
            )
        for key, value in fields.items():
            setattr(employee, key, value)
        employee.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            if "mobile" in str(exc.orig):
                raise ConflictError("mobile", data.mobile)
            raise
        await db.refresh(employee)

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            old_values=old_values,
            new_values=_snapshot(employee),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        return employee

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        ctx: RequestContext,
        employee_id: uuid.UUID,
    ) -> None:
        employee = await EmployeeService.get_employee(db, ctx, employee_id)
        old_values = _snapshot(employee)
        await db.delete(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="employee",
            entity_id=employee_id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            old_values=old_values,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info("Employee %s deleted from company %s", employee_id, ctx.company_id)

    # ── History ─────────────────────────────────────────────────────

    @staticmethod
    async def get_history(
        db: AsyncSession,
        ctx: RequestContext,
        employee_id: uuid.UUID,
    ) -> EmployeeHistoryResponse:
        """Attendance newest first, finalised pay newest first, and totals."""
        employee = await EmployeeService.get_employee(db, ctx, employee_id)

        attendance = (
            await db.execute(
                select(AttendanceRecord)
                .where(AttendanceRecord.employee_id == employee.id)
                .order_by(AttendanceRecord.date.desc())
            )
        ).scalars().all()
        pay_rows = (
            await db.execute(
                select(PayHistory)
                .where(PayHistory.employee_id == employee.id)
                .order_by(PayHistory.month.desc())
            )
        ).scalars().all()

        totals = EmployeeHistoryTotals(
            present_days=sum(1 for r in attendance if r.status == AttendanceStatus.present),
            absent_days=sum(1 for r in attendance if r.status == AttendanceStatus.absent),
            total_paid=sum(float(p.final_pay or 0) for p in pay_rows),
        )
        return EmployeeHistoryResponse(
            employee=EmployeeResponse.model_validate(employee),
            attendance=[AttendanceRecordResponse.model_validate(r) for r in attendance],
            pay_history=[PayHistoryResponse.model_validate(p) for p in pay_rows],
            totals=totals,
        )

    # ── Import ──────────────────────────────────────────────────────

    @staticmethod
    async def import_employees(
        db: AsyncSession,
        ctx: RequestContext,
        filename: str,
        content: bytes,
    ) -> ImportResult:
        """Validate every row, insert the valid ones, report the rest.

        A row whose mobile already exists in the company, or appeared in an
        earlier row of the same file, is skipped without an error entry and
        only counted in ``skipped_duplicates``.
        """
        rows = importer.read_rows(filename, content)

        existing = set(
            (
                await db.execute(
                    select(Employee.mobile).where(Employee.company_id == ctx.company_id)
                )
            ).scalars().all()
        )
        supervisor_ids: set[uuid.UUID] = set()
        if ctx.is_owner:
            supervisor_ids = set(
                (
                    await db.execute(
                        select(Supervisor.id).where(
                            Supervisor.company_id == ctx.company_id,
                            Supervisor.status == SupervisorStatus.active,
                        )
                    )
                ).scalars().all()
            )

        result = ImportResult()
        for index, raw in enumerate(rows):
            row_number = index + 2
            parsed, errors = importer.validate_row(raw)
            if parsed is None:
                result.errors.append(ImportRowError(row=row_number, errors=errors))
                continue

            if parsed.mobile in existing:
                result.skipped_duplicates += 1
                continue

            fields = parsed.to_employee_fields()
            if ctx.is_supervisor:
                fields["supervisor_id"] = ctx.supervisor_id
            elif fields["supervisor_id"] is not None and fields["supervisor_id"] not in supervisor_ids:
                result.errors.append(
                    ImportRowError(row=row_number, errors=["supervisorId: Unknown supervisor"]),
                )
                continue

            fields["employment_type"] = EmploymentType(fields["employment_type"])
            db.add(
                Employee(
                    **fields,
                    company_id=ctx.company_id,
                    owner_id=ctx.owner_id,
                    status=EmployeeStatus.active,
                )
            )
            existing.add(parsed.mobile)
            result.imported += 1

        await db.flush()
        if result.imported:
            await create_audit_entry(
                db,
                action="import",
                entity_type="employee",
                entity_id=ctx.company_id,
                company_id=ctx.company_id,
                actor_id=ctx.actor_id,
                actor_role=ctx.role.value,
                new_values={
                    "file": filename,
                    "imported": result.imported,
                    "skipped_duplicates": result.skipped_duplicates,
                    "errors": len(result.errors),
                },
                ip_address=ctx.ip_address,
                user_agent=ctx.user_agent,
            )
        logger.info(
            "Import %s: %d imported, %d duplicates skipped, %d rows rejected",
            filename, result.imported, result.skipped_duplicates, len(result.errors),
        )
        return result
