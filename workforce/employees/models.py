"""Employee ORM models: Employee, PayHistory.

Column names match the PostgreSQL schema defined in 001_initial_schema.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce.common.constants import EmployeeStatus, EmploymentType
from workforce.database import Base, enum_values

if TYPE_CHECKING:
    from workforce.attendance.models import AttendanceRecord
    from workforce.companies.models import Company


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """A worker on a company's rolls, paid either monthly (FIXED) or per day (DAILY)."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "mobile", name="uq_employee_company_mobile"),
        sa.Index("ix_employees_company_status", "company_id", "status"),
        sa.Index("ix_employees_supervisor_id", "supervisor_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    supervisor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("supervisors.id", ondelete="SET NULL"),
    )
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("owners.id"),
    )

    # ── Identity ────────────────────────────────────────────────────
    full_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    mobile: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    aadhar: Mapped[Optional[str]] = mapped_column(sa.String(12))
    pan: Mapped[Optional[str]] = mapped_column(sa.String(10))
    address: Mapped[Optional[str]] = mapped_column(sa.String(500))
    city: Mapped[Optional[str]] = mapped_column(sa.String(100))
    state: Mapped[Optional[str]] = mapped_column(sa.String(100))
    zipcode: Mapped[Optional[str]] = mapped_column(sa.String(10))

    # ── Pay ─────────────────────────────────────────────────────────
    employment_type: Mapped[EmploymentType] = mapped_column(
        sa.Enum(EmploymentType, name="employment_type", values_callable=enum_values),
        nullable=False,
    )
    monthly_salary: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(12, 2))
    daily_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(12, 2))

    join_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[EmployeeStatus] = mapped_column(
        sa.Enum(EmployeeStatus, name="employee_status", values_callable=enum_values),
        default=EmployeeStatus.active,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    company: Mapped[Company] = relationship(back_populates="employees")
    attendance_records: Mapped[list[AttendanceRecord]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    pay_history: Mapped[list[PayHistory]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def configured_rate(self) -> Optional[Decimal]:
        """The rate that matters for this employee's type."""
        if self.employment_type == EmploymentType.fixed:
            return self.monthly_salary
        return self.daily_rate

    def __repr__(self) -> str:
        return f"<Employee {self.full_name!r} ({self.employment_type.value})>"


# ═════════════════════════════════════════════════════════════════════
# Pay history
# ═════════════════════════════════════════════════════════════════════


class PayHistory(Base):
    """Snapshot of one employee's report row for a finalised month."""

    __tablename__ = "pay_history"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "month", name="uq_pay_history_employee_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # First day of the paid month
    month: Mapped[date] = mapped_column(sa.Date, nullable=False)
    present_days: Mapped[int] = mapped_column(sa.Integer, default=0)
    absent_days: Mapped[int] = mapped_column(sa.Integer, default=0)
    base_pay: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=0)
    deductions: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=0)
    final_pay: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), default=0)
    finalized_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    employee: Mapped[Employee] = relationship(back_populates="pay_history")

    def __repr__(self) -> str:
        return f"<PayHistory employee_id={self.employee_id} month={self.month}>"
