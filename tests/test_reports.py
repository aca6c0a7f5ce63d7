"""Reports module test suite — monthly report (JSON / CSV / PDF), ledger CSV,
pay finalisation, pay history, and the subscription gate.

Tests exercise the HTTP API; the aggregation rules themselves are covered
in test_calculator.py.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select, update

from workforce.common.constants import AttendanceStatus
from workforce.companies.models import Company
from workforce.employees.models import PayHistory

BASE = "/api/v1/reports"
JUNE = {"month": 6, "year": 2025}


async def _seed_june(fixed_employee, daily_employee, add_attendance, marker=None):
    """FIXED: 1 present + 3 absent; DAILY: 8h + 4h present, one absent, one in July."""
    kwargs = {"marked_by_supervisor_id": marker} if marker else {}
    await add_attendance(fixed_employee, date(2025, 6, 1), **kwargs)
    for day in (2, 3, 4):
        await add_attendance(
            fixed_employee, date(2025, 6, day), status=AttendanceStatus.absent, **kwargs,
        )
    await add_attendance(daily_employee, date(2025, 6, 1), **kwargs)
    await add_attendance(
        daily_employee, date(2025, 6, 2),
        in_time="09:00", out_time="13:00", work_hours=Decimal("4.00"), **kwargs,
    )
    await add_attendance(daily_employee, date(2025, 6, 3), status=AttendanceStatus.absent, **kwargs)
    await add_attendance(daily_employee, date(2025, 7, 1), **kwargs)


# ═════════════════════════════════════════════════════════════════════
# 1. MONTHLY REPORT
# ═════════════════════════════════════════════════════════════════════


async def test_monthly_report_json(
    client, owner_headers, fixed_employee, daily_employee, add_attendance,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance)

    resp = await client.get(f"{BASE}/monthly", params=JUNE, headers=owner_headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_days"] == 30
    fixed_row, daily_row = data["rows"]

    assert fixed_row["full_name"] == "Anil Sharma"
    assert fixed_row["present_days"] == 1
    assert fixed_row["absent_days"] == 3
    assert fixed_row["deductions"] == 3000
    assert fixed_row["final_pay"] == -2000

    assert daily_row["present_days"] == 2
    assert daily_row["absent_days"] == 1
    assert daily_row["calculated_wage"] == 1200
    assert daily_row["final_pay"] == 1200

    assert data["totals"]["final_pay"] == -800
    assert data["totals"]["deductions"] == 3000


async def test_supervisor_report_covers_their_team(
    client, supervisor_headers, fixed_employee, daily_employee, add_attendance,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance)

    resp = await client.get(f"{BASE}/monthly", params=JUNE, headers=supervisor_headers)

    rows = resp.json()["data"]["rows"]
    assert [r["full_name"] for r in rows] == ["Bhavna Desai"]


async def test_monthly_report_rejects_month_zero(client, owner_headers, test_company):
    resp = await client.get(
        f"{BASE}/monthly", params={"month": 0, "year": 2025}, headers=owner_headers,
    )
    assert resp.status_code == 422


async def test_monthly_csv_download(
    client, owner_headers, fixed_employee, daily_employee, add_attendance,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance)

    resp = await client.get(f"{BASE}/monthly/csv", params=JUNE, headers=owner_headers)

    assert resp.status_code == 200
    assert "monthly-report-June-2025.csv" in resp.headers["content-disposition"]
    lines = resp.text.split("\n")
    assert lines[0].startswith("Employee Name,Type,")
    assert lines[1] == "Anil Sharma,FIXED,30,1,3,0.00,3000.00,-2000.00"
    assert lines[2] == "Bhavna Desai,DAILY,30,2,1,1200.00,0.00,1200.00"


async def test_monthly_pdf_download(client, owner_headers, fixed_employee):
    resp = await client.get(f"{BASE}/monthly/pdf", params=JUNE, headers=owner_headers)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


async def test_ledger_csv_download(
    client, owner_headers, test_supervisor, fixed_employee, daily_employee, add_attendance,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance, marker=test_supervisor["id"])

    resp = await client.get(f"{BASE}/ledger/csv", params=JUNE, headers=owner_headers)

    assert resp.status_code == 200
    lines = resp.text.split("\n")
    # header + 4 FIXED days + 3 DAILY days in June
    assert len(lines) == 8
    daily_lines = [line.split(",") for line in lines if line.startswith("Bhavna Desai")]
    assert [cells[10] for cells in daily_lines] == ["800.00", "1200.00", "1200.00"]
    assert all(cells[11] == "Suresh Kumar" for cells in daily_lines)
    assert all(cells[12] == "Shree Textiles" for cells in daily_lines)


# ═════════════════════════════════════════════════════════════════════
# 2. FINALISE / PAY HISTORY
# ═════════════════════════════════════════════════════════════════════


async def test_finalize_month_writes_pay_history(
    client, owner_headers, fixed_employee, daily_employee, add_attendance, db,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance)

    resp = await client.post(f"{BASE}/monthly/finalize", params=JUNE, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["employees_finalized"] == 2

    # A second run replaces the snapshot instead of duplicating it.
    resp = await client.post(f"{BASE}/monthly/finalize", params=JUNE, headers=owner_headers)
    assert resp.status_code == 200

    rows = (await db.execute(
        select(PayHistory).where(PayHistory.month == date(2025, 6, 1))
    )).scalars().all()
    assert len(rows) == 2
    by_employee = {r.employee_id: r for r in rows}
    assert by_employee[daily_employee["id"]].final_pay == Decimal("1200.00")
    assert by_employee[fixed_employee["id"]].deductions == Decimal("3000.00")

    history = await client.get(f"{BASE}/pay-history", params=JUNE, headers=owner_headers)
    assert len(history.json()["data"]) == 2


async def test_supervisor_cannot_finalize(client, supervisor_headers, daily_employee):
    resp = await client.post(f"{BASE}/monthly/finalize", params=JUNE, headers=supervisor_headers)
    assert resp.status_code == 403


async def test_supervisor_pay_history_is_scoped(
    client, owner_headers, supervisor_headers, fixed_employee, daily_employee, add_attendance,
):
    await _seed_june(fixed_employee, daily_employee, add_attendance)
    await client.post(f"{BASE}/monthly/finalize", params=JUNE, headers=owner_headers)

    resp = await client.get(f"{BASE}/pay-history", params=JUNE, headers=supervisor_headers)

    (row,) = resp.json()["data"]
    assert row["employee_id"] == str(daily_employee["id"])


# ═════════════════════════════════════════════════════════════════════
# 3. SUBSCRIPTION GATE
# ═════════════════════════════════════════════════════════════════════


async def test_expired_subscription_blocks_reports(
    client, owner_headers, test_company, fixed_employee, db,
):
    await db.execute(
        update(Company)
        .where(Company.id == test_company["id"])
        .values(subscription_end_date=date.today() - timedelta(days=1))
    )
    await db.commit()

    resp = await client.get(f"{BASE}/monthly", params=JUNE, headers=owner_headers)

    assert resp.status_code == 402
    assert resp.json()["type"].endswith("/subscription-expired")
