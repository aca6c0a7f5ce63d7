"""CSV / PDF exporter tests — column order, 2-decimal amounts, status labels."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from workforce.common.constants import AttendanceStatus, EmployeeStatus, EmploymentType
from workforce.reports.calculator import compute_totals
from workforce.reports.exporters import (
    LEDGER_HEADERS,
    MONTHLY_REPORT_HEADERS,
    attendance_history_pdf,
    attendance_ledger_csv,
    employees_csv,
    monthly_report_csv,
    monthly_report_pdf,
)
from workforce.reports.schemas import LedgerEntry, MonthlyReportRow


def _row(**overrides) -> MonthlyReportRow:
    values = dict(
        employee_id=uuid.uuid4(),
        full_name="Bhavna Desai",
        mobile="9876500002",
        employment_type=EmploymentType.daily,
        total_days=30,
        present_days=2,
        absent_days=1,
        daily_rate=800,
        calculated_wage=1066.666,
        final_pay=1066.666,
    )
    values.update(overrides)
    return MonthlyReportRow(**values)


def _entry(**overrides) -> LedgerEntry:
    values = dict(
        employee_id=uuid.uuid4(),
        full_name="Bhavna Desai",
        mobile="9876500002",
        employment_type=EmploymentType.daily,
        date=date(2025, 6, 2),
        status=AttendanceStatus.present,
        in_time="09:00",
        out_time="13:00",
        work_hours=4,
        rate=800,
        wage=400,
        cumulative_total=1200,
        marked_by="Suresh Kumar",
        company="Shree Textiles",
    )
    values.update(overrides)
    return LedgerEntry(**values)


# ═════════════════════════════════════════════════════════════════════
# 1. MONTHLY REPORT CSV
# ═════════════════════════════════════════════════════════════════════


def test_monthly_csv_header_and_rounding():
    lines = monthly_report_csv([_row()]).decode().split("\n")

    assert lines[0] == ",".join(MONTHLY_REPORT_HEADERS)
    assert lines[1] == "Bhavna Desai,DAILY,30,2,1,1066.67,0.00,1066.67"


def test_monthly_csv_fixed_row_keeps_negative_final_pay():
    row = _row(
        full_name="Anil Sharma",
        employment_type=EmploymentType.fixed,
        present_days=1,
        absent_days=3,
        daily_rate=1000,
        calculated_wage=0,
        deductions=3000,
        final_pay=-2000,
    )
    lines = monthly_report_csv([row]).decode().split("\n")
    assert lines[1] == "Anil Sharma,FIXED,30,1,3,0.00,3000.00,-2000.00"


def test_monthly_csv_empty_report_is_header_only():
    assert monthly_report_csv([]).decode() == ",".join(MONTHLY_REPORT_HEADERS)


def test_monthly_csv_does_not_mutate_rows():
    row = _row()
    before = row.model_dump()
    monthly_report_csv([row])
    assert row.model_dump() == before


# ═════════════════════════════════════════════════════════════════════
# 2. LEDGER CSV
# ═════════════════════════════════════════════════════════════════════


def test_ledger_csv_columns():
    lines = attendance_ledger_csv([_entry()]).decode().split("\n")

    assert lines[0].split(",") == LEDGER_HEADERS
    assert lines[1].split(",") == [
        "Bhavna Desai", "9876500002", "DAILY", "2025-06-02", "Present",
        "09:00", "13:00", "4.00", "800.00", "400.00", "1200.00",
        "Suresh Kumar", "Shree Textiles",
    ]


def test_ledger_csv_absent_day_has_blank_times():
    entry = _entry(
        status=AttendanceStatus.absent, in_time=None, out_time=None,
        work_hours=None, wage=0,
    )
    cells = attendance_ledger_csv([entry]).decode().split("\n")[1].split(",")

    assert cells[4] == "Absent"
    assert cells[5:8] == ["", "", ""]
    assert cells[9] == "0.00"


# ═════════════════════════════════════════════════════════════════════
# 3. EMPLOYEE ROSTER CSV
# ═════════════════════════════════════════════════════════════════════


def test_employees_csv_roster():
    emp = SimpleNamespace(
        full_name="Anil Sharma",
        mobile="9876500001",
        aadhar=None,
        pan="ABCDE1234F",
        address=None,
        employment_type=EmploymentType.fixed,
        monthly_salary=Decimal("30000.00"),
        daily_rate=None,
        supervisor_id=None,
        join_date=date(2024, 1, 15),
        status=EmployeeStatus.active,
    )
    lines = employees_csv([emp]).decode().split("\n")

    assert lines[0] == (
        "name,mobile,aadhar,pan,address,type,salary,dailyRate,supervisorId,joinDate,status"
    )
    assert lines[1] == (
        "Anil Sharma,9876500001,,ABCDE1234F,,FIXED,30000.00,,,2024-01-15,active"
    )


def test_exported_roster_passes_import_validation():
    from workforce.employees.importer import read_rows, validate_row

    emp = SimpleNamespace(
        full_name="Bhavna Desai", mobile="9876500002", aadhar="123456789012", pan=None,
        address="Ring Road", employment_type=EmploymentType.daily, monthly_salary=None,
        daily_rate=Decimal("800.00"), supervisor_id=None, join_date=date(2024, 3, 1),
        status=EmployeeStatus.active,
    )
    (raw,) = read_rows("employees.csv", employees_csv([emp]))
    row, errors = validate_row(raw)

    assert errors == []
    assert row.type == "DAILY"
    assert row.dailyRate == 800


# ═════════════════════════════════════════════════════════════════════
# 4. PDF
# ═════════════════════════════════════════════════════════════════════


def test_monthly_pdf_is_a_pdf_document():
    rows = [_row(), _row(full_name="Second")]
    pdf = monthly_report_pdf(rows, compute_totals(rows), 6, 2025, company_name="Shree Textiles")

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_attendance_history_pdf_is_a_pdf_document():
    summary = SimpleNamespace(
        full_name="Anil Sharma",
        mobile="9876500001",
        present_days=20,
        absent_days=2,
        total_days=22,
        attendance_percentage=90.91,
    )
    pdf = attendance_history_pdf([summary], 6, 2025)
    assert pdf.startswith(b"%PDF")
