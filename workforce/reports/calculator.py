"""Monthly wage & attendance aggregation.

Pure functions over already-fetched employees and attendance records; no
database access, no mutation of the inputs. Objects are read by attribute
so ORM rows and plain dataclasses work alike.

Rules per employee:
  * no records in the period → wage, deductions and final pay are all 0;
  * FIXED with a salary → ``daily_rate = salary / days_in_month``,
    ``deductions = daily_rate * absent_days`` and
    ``final_pay = daily_rate - deductions`` (``calculated_wage`` stays 0);
  * DAILY with a rate → each Present record with work hours earns
    ``work_hours * daily_rate / STANDARD_SHIFT_HOURS``;
  * a missing rate yields a zero row.

Amounts are floats and are never rounded here.

Months are 0-based indexes (0 = January, 11 = December) throughout this
module; the HTTP layer takes 1-12 and subtracts one.
"""

from __future__ import annotations

import calendar
import uuid
from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from workforce.common.constants import AttendanceStatus, EmploymentType
from workforce.config import settings
from workforce.reports.schemas import LedgerEntry, MonthlyReportRow, ReportTotals


# ── Calendar helpers ────────────────────────────────────────────────


def days_in_month(year: int, month: int) -> int:
    """Number of days in month index *month* (0-11) of *year*."""
    if not 0 <= month <= 11:
        raise ValueError(f"month index must be in 0..11, got {month}")
    return calendar.monthrange(year, month + 1)[1]


def period_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the month, both inclusive."""
    return date(year, month + 1, 1), date(year, month + 1, days_in_month(year, month))


def _amount(value: Any) -> Optional[float]:
    """Numeric/Decimal column value → float; falsy values count as missing."""
    if not value:
        return None
    return float(value)


def _records_by_employee(
    attendance_records: Iterable[Any],
    start: date,
    end: date,
) -> dict[uuid.UUID, list[Any]]:
    grouped: dict[uuid.UUID, list[Any]] = defaultdict(list)
    for record in attendance_records:
        if start <= record.date <= end:
            grouped[record.employee_id].append(record)
    return grouped


# ── Report ──────────────────────────────────────────────────────────


def build_row(
    employee: Any,
    records: Sequence[Any],
    total_days: int,
    *,
    shift_hours: float,
) -> MonthlyReportRow:
    """Compute one report row from the employee's in-period *records*."""
    present_days = sum(1 for r in records if r.status == AttendanceStatus.present)
    absent_days = sum(1 for r in records if r.status == AttendanceStatus.absent)

    row = MonthlyReportRow(
        employee_id=employee.id,
        full_name=employee.full_name,
        mobile=employee.mobile,
        employment_type=employee.employment_type,
        total_days=total_days,
        present_days=present_days,
        absent_days=absent_days,
    )
    if not records:
        return row

    if employee.employment_type == EmploymentType.fixed:
        salary = _amount(employee.monthly_salary)
        if salary is not None:
            daily_rate = salary / total_days
            row.daily_rate = daily_rate
            row.deductions = daily_rate * absent_days
            row.final_pay = daily_rate - row.deductions

    elif employee.employment_type == EmploymentType.daily:
        rate = _amount(employee.daily_rate)
        if rate is not None:
            hourly_rate = rate / shift_hours
            wage = 0.0
            for record in records:
                if record.status != AttendanceStatus.present or record.work_hours is None:
                    continue
                wage += float(record.work_hours) * hourly_rate
            row.daily_rate = rate
            row.calculated_wage = wage
            row.final_pay = wage

    return row


def generate_report(
    employees: Sequence[Any],
    attendance_records: Iterable[Any],
    month: int,
    year: int,
    *,
    shift_hours: Optional[float] = None,
) -> list[MonthlyReportRow]:
    """One row per employee, in input order, for month index *month* of *year*.

    Records dated outside the month are ignored.
    """
    start, end = period_bounds(year, month)
    total_days = days_in_month(year, month)
    hours = shift_hours or settings.STANDARD_SHIFT_HOURS
    grouped = _records_by_employee(attendance_records, start, end)

    return [
        build_row(emp, grouped.get(emp.id, []), total_days, shift_hours=hours)
        for emp in employees
    ]


def compute_totals(rows: Iterable[MonthlyReportRow]) -> ReportTotals:
    totals = ReportTotals()
    for row in rows:
        totals.calculated_wage += row.calculated_wage
        totals.deductions += row.deductions
        totals.final_pay += row.final_pay
    return totals


# ── Day-by-day ledger ───────────────────────────────────────────────


def day_wage(
    employee: Any,
    record: Any,
    total_days: int,
    *,
    shift_hours: float,
) -> tuple[float, float]:
    """``(rate, wage)`` earned by *employee* for a single attendance *record*.

    DAILY employees earn their hourly share of the daily rate for the hours
    worked; FIXED employees earn one day's prorated salary per Present day.
    Absent days earn nothing.
    """
    if employee.employment_type == EmploymentType.fixed:
        rate = _amount(employee.monthly_salary) or 0.0
        if record.status != AttendanceStatus.present or not rate:
            return rate, 0.0
        return rate, rate / total_days

    rate = _amount(employee.daily_rate) or 0.0
    if record.status != AttendanceStatus.present or record.work_hours is None:
        return rate, 0.0
    return rate, float(record.work_hours) * rate / shift_hours


def build_ledger(
    employees: Sequence[Any],
    attendance_records: Iterable[Any],
    month: int,
    year: int,
    *,
    marked_by_names: Optional[Mapping[uuid.UUID, str]] = None,
    company_name: str = "",
    shift_hours: Optional[float] = None,
) -> list[LedgerEntry]:
    """Per-employee, per-day lines with a running cumulative wage.

    Employees appear in input order; each employee's days are sorted by
    date and the cumulative total restarts for every employee.
    """
    start, end = period_bounds(year, month)
    total_days = days_in_month(year, month)
    hours = shift_hours or settings.STANDARD_SHIFT_HOURS
    names = marked_by_names or {}
    grouped = _records_by_employee(attendance_records, start, end)

    entries: list[LedgerEntry] = []
    for emp in employees:
        cumulative = 0.0
        for record in sorted(grouped.get(emp.id, []), key=lambda r: r.date):
            rate, wage = day_wage(emp, record, total_days, shift_hours=hours)
            cumulative += wage
            marker = record.marked_by_supervisor_id or record.marked_by_owner_id
            entries.append(
                LedgerEntry(
                    employee_id=emp.id,
                    full_name=emp.full_name,
                    mobile=emp.mobile,
                    employment_type=emp.employment_type,
                    date=record.date,
                    status=record.status,
                    in_time=record.in_time,
                    out_time=record.out_time,
                    work_hours=(
                        float(record.work_hours) if record.work_hours is not None else None
                    ),
                    rate=rate,
                    wage=wage,
                    cumulative_total=cumulative,
                    marked_by=names.get(marker, "") if marker else "",
                    company=company_name,
                )
            )
    return entries
