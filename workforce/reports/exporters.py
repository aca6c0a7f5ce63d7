"""CSV and PDF renderers for monthly reports and attendance summaries.

CSV output is plain comma-joined text without quoting; field values are
assumed not to contain commas or newlines. PDFs are A4 documents built
with reportlab's platypus layer. None of these functions mutate their
inputs.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from workforce.common.constants import (
    ATTENDANCE_STATUS_LABELS,
    DATE_FORMAT,
    MONTH_NAMES,
    TIME_FORMAT,
    AttendanceStatus,
)
from workforce.employees.importer import TEMPLATE_COLUMNS
from workforce.reports.schemas import LedgerEntry, MonthlyReportRow, ReportTotals

MONTHLY_REPORT_HEADERS = [
    "Employee Name",
    "Type",
    "Total Days",
    "Present",
    "Absent",
    "Base Pay",
    "Deductions",
    "Final Pay",
]

LEDGER_HEADERS = [
    "Employee Name",
    "Mobile",
    "Type",
    "Date",
    "Status",
    "In Time",
    "Out Time",
    "Work Hours",
    "Rate",
    "Wage",
    "Cumulative Total",
    "Marked By",
    "Company",
]

ATTENDANCE_SUMMARY_HEADERS = [
    "Employee",
    "Mobile",
    "Present",
    "Absent",
    "Total",
    "Attendance %",
]

TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f3a5f")),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 8),
    ("ALIGN", (1, 0), (-1, -1), "CENTER"),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f2f2")]),
    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
])


def _money(value: float) -> str:
    return f"{value:.2f}"


def _type_label(value: Any) -> str:
    return getattr(value, "value", value)


def _join_lines(lines: Iterable[Sequence[Any]]) -> bytes:
    return "\n".join(",".join(str(cell) for cell in line) for line in lines).encode("utf-8")


# ═════════════════════════════════════════════════════════════════════
# CSV
# ═════════════════════════════════════════════════════════════════════


def monthly_report_csv(rows: Sequence[MonthlyReportRow]) -> bytes:
    """Monthly summary: one line per employee, amounts to 2 decimals."""
    lines: list[list[Any]] = [MONTHLY_REPORT_HEADERS]
    for row in rows:
        lines.append([
            row.full_name,
            _type_label(row.employment_type),
            row.total_days,
            row.present_days,
            row.absent_days,
            _money(row.calculated_wage),
            _money(row.deductions),
            _money(row.final_pay),
        ])
    return _join_lines(lines)


def attendance_ledger_csv(entries: Sequence[LedgerEntry]) -> bytes:
    """Detailed export: one line per employee per attendance day."""
    lines: list[list[Any]] = [LEDGER_HEADERS]
    for entry in entries:
        lines.append([
            entry.full_name,
            entry.mobile,
            _type_label(entry.employment_type),
            entry.date.isoformat(),
            ATTENDANCE_STATUS_LABELS[AttendanceStatus(entry.status)],
            entry.in_time or "",
            entry.out_time or "",
            _money(entry.work_hours) if entry.work_hours is not None else "",
            _money(entry.rate),
            _money(entry.wage),
            _money(entry.cumulative_total),
            entry.marked_by,
            entry.company,
        ])
    return _join_lines(lines)


def employees_csv(employees: Sequence[Any]) -> bytes:
    """Employee roster under the import sheet's headers, plus ``status``.

    An exported file can be fed back to the import unchanged.
    """
    lines: list[list[Any]] = [TEMPLATE_COLUMNS + ["status"]]
    for emp in employees:
        lines.append([
            emp.full_name,
            emp.mobile,
            emp.aadhar or "",
            emp.pan or "",
            emp.address or "",
            _type_label(emp.employment_type),
            emp.monthly_salary if emp.monthly_salary is not None else "",
            emp.daily_rate if emp.daily_rate is not None else "",
            emp.supervisor_id or "",
            emp.join_date.isoformat() if emp.join_date else "",
            _type_label(emp.status),
        ])
    return _join_lines(lines)


# ═════════════════════════════════════════════════════════════════════
# PDF
# ═════════════════════════════════════════════════════════════════════


def _document(buffer: io.BytesIO, *, title: str, wide: bool = False) -> SimpleDocTemplate:
    return SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4) if wide else A4,
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )


def _heading(title: str, subtitle: Optional[str]) -> list:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=16,
        alignment=1,
        spaceAfter=6,
    )
    story: list = [Paragraph(title, title_style)]
    if subtitle:
        story.append(Paragraph(escape(subtitle), styles["Normal"]))
    stamp = datetime.now().strftime(f"{DATE_FORMAT} {TIME_FORMAT}")
    story.append(Paragraph(f"Generated {stamp}", styles["Italic"]))
    story.append(Spacer(1, 8 * mm))
    return story


def monthly_report_pdf(
    rows: Sequence[MonthlyReportRow],
    totals: ReportTotals,
    month: int,
    year: int,
    *,
    company_name: str = "",
) -> bytes:
    """Printable monthly wage report with a totals line."""
    title = f"Monthly Attendance and Wage Report - {MONTH_NAMES[month - 1]} {year}"
    buffer = io.BytesIO()
    doc = _document(buffer, title=title, wide=True)
    story = _heading(title, company_name or None)

    data: list[list[Any]] = [MONTHLY_REPORT_HEADERS]
    for row in rows:
        data.append([
            row.full_name,
            _type_label(row.employment_type),
            row.total_days,
            row.present_days,
            row.absent_days,
            _money(row.calculated_wage),
            _money(row.deductions),
            _money(row.final_pay),
        ])
    data.append([
        "Total", "", "", "", "",
        _money(totals.calculated_wage),
        _money(totals.deductions),
        _money(totals.final_pay),
    ])

    table = Table(data, repeatRows=1)
    table.setStyle(TABLE_STYLE)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
    ]))
    story.append(table)
    doc.build(story)
    return buffer.getvalue()


def attendance_history_pdf(
    summaries: Sequence[Any],
    month: int,
    year: int,
    *,
    company_name: str = "",
) -> bytes:
    """Per-employee present/absent summary for a month.

    *summaries* need ``full_name``, ``mobile``, ``present_days``,
    ``absent_days``, ``total_days`` and ``attendance_percentage``.
    """
    title = f"Attendance History - {MONTH_NAMES[month - 1]} {year}"
    buffer = io.BytesIO()
    doc = _document(buffer, title=title)
    story = _heading(title, company_name or None)

    data: list[list[Any]] = [ATTENDANCE_SUMMARY_HEADERS]
    for summary in summaries:
        data.append([
            summary.full_name,
            summary.mobile,
            summary.present_days,
            summary.absent_days,
            summary.total_days,
            f"{summary.attendance_percentage:.1f}%",
        ])

    table = Table(data, repeatRows=1)
    table.setStyle(TABLE_STYLE)
    story.append(table)
    doc.build(story)
    return buffer.getvalue()
