"""Attendance Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Entry / *Request  → request bodies (write)
  - *Response          → response bodies (read)
  - *Summary           → per-employee monthly aggregates
"""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workforce.common.constants import AttendanceStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ═════════════════════════════════════════════════════════════════════
# Marking
# ═════════════════════════════════════════════════════════════════════


class AttendanceEntry(BaseModel):
    """One employee's mark for the day being saved."""

    employee_id: uuid.UUID
    status: AttendanceStatus
    in_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    out_time: Optional[str] = Field(None, pattern=TIME_PATTERN)

    @field_validator("in_time", "out_time", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AttendanceDayRequest(BaseModel):
    """Full replacement of a day's attendance for the caller's employees."""

    entries: list[AttendanceEntry]


# ═════════════════════════════════════════════════════════════════════
# Read
# ═════════════════════════════════════════════════════════════════════


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    date: date
    status: AttendanceStatus
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    work_hours: Optional[float] = None
    marked_by_owner_id: Optional[uuid.UUID] = None
    marked_by_supervisor_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None


class AttendanceDayResponse(BaseModel):
    date: date
    records: list[AttendanceRecordResponse]
    present: int = 0
    absent: int = 0
    unmarked: int = 0


class AttendanceSummary(BaseModel):
    """One employee's month: day → status grid plus totals."""

    employee_id: uuid.UUID
    full_name: str
    mobile: str
    days: dict[int, AttendanceStatus] = {}
    present_days: int = 0
    absent_days: int = 0
    total_days: int = 0
    attendance_percentage: float = 0.0


class AttendanceHistoryResponse(BaseModel):
    month: int
    year: int
    days_in_month: int
    employees: list[AttendanceSummary]
