"""Reports Pydantic v2 schemas — monthly wage rows, ledger lines, pay history."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from workforce.common.constants import AttendanceStatus, EmploymentType


# ── Monthly wage report ─────────────────────────────────────────────


class MonthlyReportRow(BaseModel):
    """One employee's attendance counts and pay for a month."""

    employee_id: uuid.UUID
    full_name: str
    mobile: str
    employment_type: EmploymentType
    total_days: int
    present_days: int = 0
    absent_days: int = 0
    daily_rate: float = 0.0
    calculated_wage: float = 0.0
    deductions: float = 0.0
    final_pay: float = 0.0


class ReportTotals(BaseModel):
    calculated_wage: float = 0.0
    deductions: float = 0.0
    final_pay: float = 0.0


class MonthlyReportResponse(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int
    total_days: int
    rows: list[MonthlyReportRow]
    totals: ReportTotals


# ── Detailed attendance ledger ──────────────────────────────────────


class LedgerEntry(BaseModel):
    """One attendance day of one employee, with its wage and running total."""

    employee_id: uuid.UUID
    full_name: str
    mobile: str
    employment_type: EmploymentType
    date: date
    status: AttendanceStatus
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    work_hours: Optional[float] = None
    rate: float = 0.0
    wage: float = 0.0
    cumulative_total: float = 0.0
    marked_by: str = ""
    company: str = ""


# ── Pay history ─────────────────────────────────────────────────────


class PayHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    month: date
    present_days: int
    absent_days: int
    base_pay: float
    deductions: float
    final_pay: float
    finalized_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None


class FinalizeResponse(BaseModel):
    month: int
    year: int
    employees_finalized: int
    totals: ReportTotals
