"""Dashboard response schemas."""


from datetime import date

from pydantic import BaseModel


class EmployeeTypeBreakdown(BaseModel):
    fixed: int = 0
    daily: int = 0


class DailyAttendancePoint(BaseModel):
    date: date
    present: int = 0
    absent: int = 0


class DashboardSummaryResponse(BaseModel):
    total_employees: int = 0
    present_today: int = 0
    absent_today: int = 0
    active_supervisors: int = 0
    employee_types: EmployeeTypeBreakdown
    last_7_days: list[DailyAttendancePoint]
