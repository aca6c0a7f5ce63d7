"""Employee Pydantic v2 schemas — request / response validation.

Write payloads are a tagged union on ``employment_type``: a FIXED employee
must carry ``monthly_salary`` and a DAILY employee ``daily_rate``.
"""


import uuid
from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workforce.attendance.schemas import AttendanceRecordResponse
from workforce.common.constants import EmployeeStatus, EmploymentType
from workforce.reports.schemas import PayHistoryResponse

MOBILE_PATTERN = r"^\d{10}$"
AADHAR_PATTERN = r"^\d{12}$"
PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"


# ═════════════════════════════════════════════════════════════════════
# Write schemas
# ═════════════════════════════════════════════════════════════════════


class _EmployeeFields(BaseModel):
    """Identity fields shared by every employee payload."""

    full_name: str = Field(..., min_length=1, max_length=100)
    mobile: str = Field(..., pattern=MOBILE_PATTERN)
    aadhar: Optional[str] = Field(None, pattern=AADHAR_PATTERN)
    pan: Optional[str] = Field(None, pattern=PAN_PATTERN)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zipcode: Optional[str] = Field(None, max_length=10)
    join_date: Optional[date] = None
    status: EmployeeStatus = EmployeeStatus.active
    supervisor_id: Optional[uuid.UUID] = None

    @field_validator("aadhar", "pan", "address", "city", "state", "zipcode", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("full_name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class FixedEmployeeCreate(_EmployeeFields):
    employment_type: Literal["FIXED"]
    monthly_salary: float = Field(..., gt=0)


class DailyEmployeeCreate(_EmployeeFields):
    employment_type: Literal["DAILY"]
    daily_rate: float = Field(..., gt=0)


EmployeeCreate = Annotated[
    Union[FixedEmployeeCreate, DailyEmployeeCreate],
    Field(discriminator="employment_type"),
]

# Updates carry the full record; the pay type may change along with its rate.
EmployeeUpdate = EmployeeCreate


# ═════════════════════════════════════════════════════════════════════
# Read schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company_id: uuid.UUID
    supervisor_id: Optional[uuid.UUID] = None
    full_name: str
    mobile: str
    aadhar: Optional[str] = None
    pan: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    employment_type: EmploymentType
    monthly_salary: Optional[float] = None
    daily_rate: Optional[float] = None
    join_date: Optional[date] = None
    status: EmployeeStatus
    created_at: Optional[datetime] = None


class EmployeeHistoryTotals(BaseModel):
    present_days: int = 0
    absent_days: int = 0
    total_paid: float = 0.0


class EmployeeHistoryResponse(BaseModel):
    """Attendance (newest first) and finalised pay for one employee."""

    employee: EmployeeResponse
    attendance: list[AttendanceRecordResponse]
    pay_history: list[PayHistoryResponse]
    totals: EmployeeHistoryTotals


# ═════════════════════════════════════════════════════════════════════
# Import
# ═════════════════════════════════════════════════════════════════════


class ImportRowError(BaseModel):
    """Validation failures of one spreadsheet row (row 1 is the header)."""

    row: int
    errors: list[str]


class ImportResult(BaseModel):
    imported: int = 0
    skipped_duplicates: int = 0
    errors: list[ImportRowError] = []
