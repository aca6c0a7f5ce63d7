"""Tests for common utilities — filters, search, pagination, errors and audit.

Exercises workforce/common/* directly against the in-memory database.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import _make_employee
from workforce.common.audit import AuditTrail, create_audit_entry
from workforce.common.constants import EmployeeStatus, EmploymentType
from workforce.common.exceptions import (
    ConflictError,
    NotFoundException,
    SubscriptionExpiredException,
    ValidationException,
    register_exception_handlers,
)
from workforce.common.filters import _get_column, apply_filters, apply_search, apply_sorting
from workforce.common.pagination import PaginationParams, paginate
from workforce.employees.models import Employee


# ── Helpers ─────────────────────────────────────────────────────────


async def _seed_employee(db: AsyncSession, company_id, **kwargs) -> Employee:
    join_date = kwargs.pop("join_date", None)
    emp = Employee(**_make_employee(company_id, **kwargs))
    if join_date is not None:
        emp.join_date = join_date
    db.add(emp)
    await db.flush()
    return emp


async def _names(db: AsyncSession, query) -> list[str]:
    result = await db.execute(query)
    return [e.full_name for e in result.scalars().all()]


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:
    """Tests for apply_filters utility."""

    async def test_filter_by_equality(self, db: AsyncSession, test_company):
        await _seed_employee(db, test_company["id"], full_name="Anil", mobile="9000000001")
        await _seed_employee(
            db, test_company["id"], full_name="Bhavna", mobile="9000000002",
            employment_type=EmploymentType.daily, daily_rate=800,
        )

        query = apply_filters(select(Employee), Employee, {"employment_type": EmploymentType.daily})
        assert await _names(db, query) == ["Bhavna"]

    async def test_filter_none_values_skipped(self, db: AsyncSession, test_company):
        await _seed_employee(db, test_company["id"])

        query = apply_filters(
            select(Employee), Employee,
            {"supervisor_id": None, "status": EmployeeStatus.active},
        )
        assert len(await _names(db, query)) == 1

    async def test_filter_by_ilike(self, db: AsyncSession, test_company):
        await _seed_employee(db, test_company["id"], full_name="Kavita Rao", mobile="9000000001")
        await _seed_employee(db, test_company["id"], full_name="Mohan Lal", mobile="9000000002")

        query = apply_filters(select(Employee), Employee, {"full_name__ilike": "KAV"})
        assert await _names(db, query) == ["Kavita Rao"]

    async def test_filter_by_join_date_range(self, db: AsyncSession, test_company):
        await _seed_employee(
            db, test_company["id"], full_name="E1", mobile="9000000001", join_date=date(2024, 1, 1),
        )
        await _seed_employee(
            db, test_company["id"], full_name="E2", mobile="9000000002", join_date=date(2025, 6, 1),
        )
        await _seed_employee(
            db, test_company["id"], full_name="E3", mobile="9000000003", join_date=date(2026, 1, 1),
        )

        query = apply_filters(select(Employee), Employee, {
            "join_date__from": date(2025, 1, 1),
            "join_date__to": date(2025, 12, 31),
        })
        assert await _names(db, query) == ["E2"]

    async def test_filter_by_in(self, db: AsyncSession, test_company):
        for i, name in enumerate(["Anil", "Bhavna", "Chetan"]):
            await _seed_employee(db, test_company["id"], full_name=name, mobile=f"900000000{i}")

        query = apply_filters(
            select(Employee), Employee, {"full_name__in": ["Anil", "Chetan"]},
        )
        assert set(await _names(db, query)) == {"Anil", "Chetan"}

    async def test_filter_nonexistent_column_ignored(self, db: AsyncSession, test_company):
        await _seed_employee(db, test_company["id"])

        query = apply_filters(select(Employee), Employee, {"nonexistent_field": "value"})
        assert len(await _names(db, query)) == 1


class TestApplySearch:
    """Tests for apply_search utility."""

    async def test_matches_any_column(self, db: AsyncSession, test_company):
        await _seed_employee(db, test_company["id"], full_name="Anil Sharma", mobile="9876500001")
        await _seed_employee(db, test_company["id"], full_name="Bhavna Desai", mobile="9123400002")

        by_name = apply_search(select(Employee), Employee, "sharma", ["full_name", "mobile"])
        by_mobile = apply_search(select(Employee), Employee, "91234", ["full_name", "mobile"])

        assert await _names(db, by_name) == ["Anil Sharma"]
        assert await _names(db, by_mobile) == ["Bhavna Desai"]

    def test_blank_search_is_no_op(self):
        query = select(Employee)
        assert apply_search(query, Employee, "   ", ["full_name"]) is query
        assert apply_search(query, Employee, None, ["full_name"]) is query

    def test_unknown_columns_only_is_no_op(self):
        query = select(Employee)
        assert apply_search(query, Employee, "anil", ["nickname"]) is query


class TestApplySorting:
    """Tests for apply_sorting utility."""

    async def _seed_three(self, db: AsyncSession, company_id) -> None:
        for i, name in enumerate(["Chetan", "Anil", "Bhavna"]):
            await _seed_employee(db, company_id, full_name=name, mobile=f"900000000{i}")

    async def test_sort_ascending(self, db: AsyncSession, test_company):
        await self._seed_three(db, test_company["id"])
        query = apply_sorting(select(Employee), Employee, "full_name")
        assert await _names(db, query) == ["Anil", "Bhavna", "Chetan"]

    async def test_sort_descending(self, db: AsyncSession, test_company):
        await self._seed_three(db, test_company["id"])
        query = apply_sorting(select(Employee), Employee, "-full_name")
        assert await _names(db, query) == ["Chetan", "Bhavna", "Anil"]

    def test_sort_none_no_op(self):
        query = select(Employee)
        assert apply_sorting(query, Employee, None) is query

    def test_sort_unknown_column_no_op(self):
        query = select(Employee)
        assert apply_sorting(query, Employee, "-nonexistent_field") is query


class TestGetColumn:
    """Tests for _get_column helper."""

    def test_get_existing_column(self):
        assert _get_column(Employee, "full_name") is not None

    def test_get_nonexistent_column(self):
        assert _get_column(Employee, "totally_fake_column") is None


# ═════════════════════════════════════════════════════════════════════
# PAGINATION
# ═════════════════════════════════════════════════════════════════════


class TestPagination:
    """Tests for pagination helper."""

    async def _seed_five(self, db: AsyncSession, company_id) -> None:
        for i in range(5):
            await _seed_employee(db, company_id, full_name=f"P{i}", mobile=f"900000000{i}")

    async def test_paginate_with_sort(self, db: AsyncSession, test_company):
        await self._seed_five(db, test_company["id"])

        params = PaginationParams(page=1, page_size=3, sort="-full_name")
        result = await paginate(db, select(Employee), params, model=Employee)

        assert [e.full_name for e in result.data] == ["P4", "P3", "P2"]
        assert result.meta.total == 5
        assert result.meta.total_pages == 2
        assert result.meta.has_next is True
        assert result.meta.has_prev is False

    async def test_paginate_page_2(self, db: AsyncSession, test_company):
        await self._seed_five(db, test_company["id"])

        params = PaginationParams(page=2, page_size=3, sort=None)
        result = await paginate(db, select(Employee), params, model=Employee)

        assert len(result.data) == 2
        assert result.meta.has_prev is True
        assert result.meta.has_next is False

    async def test_paginate_empty_result(self, db: AsyncSession):
        query = select(Employee).where(Employee.full_name == "ZZZ_NONEXISTENT")
        params = PaginationParams(page=1, page_size=10, sort=None)
        result = await paginate(db, query, params, model=Employee)

        assert len(result.data) == 0
        assert result.meta.total == 0
        assert result.meta.total_pages == 0

    def test_offset(self):
        assert PaginationParams(page=3, page_size=20, sort=None).offset == 40


# ═════════════════════════════════════════════════════════════════════
# PROBLEM DETAIL RESPONSES
# ═════════════════════════════════════════════════════════════════════


def _error_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundException("Employee", "abc")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("mobile", "9876500001")

    @app.get("/invalid")
    async def invalid():
        raise ValidationException({"month": ["Month must be between 1 and 12"]})

    @app.get("/expired")
    async def expired():
        raise SubscriptionExpiredException("c-1")

    @app.get("/typed/{n}")
    async def typed(n: int):
        return {"n": n}

    return app


class TestProblemDetails:
    """RFC 7807 bodies from register_exception_handlers."""

    async def _get(self, path: str):
        transport = ASGITransport(app=_error_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            return await ac.get(path)

    async def test_not_found(self):
        resp = await self._get("/missing")
        body = resp.json()
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert body["type"].endswith("/not-found")
        assert body["title"] == "Employee Not Found"
        assert body["instance"] == "/missing"
        assert "errors" not in body

    async def test_conflict_carries_field_errors(self):
        body = (await self._get("/conflict")).json()
        assert body["status"] == 409
        assert body["errors"] == {"mobile": ["'9876500001' is already in use."]}

    async def test_business_validation(self):
        body = (await self._get("/invalid")).json()
        assert body["status"] == 422
        assert body["errors"]["month"] == ["Month must be between 1 and 12"]

    async def test_subscription_expired(self):
        resp = await self._get("/expired")
        assert resp.status_code == 402
        assert resp.json()["type"].endswith("/subscription-expired")

    async def test_request_validation_is_flattened(self):
        resp = await self._get("/typed/abc")
        body = resp.json()
        assert resp.status_code == 422
        assert body["detail"] == "Request validation failed."
        assert "n" in body["errors"]


# ═════════════════════════════════════════════════════════════════════
# AUDIT TRAIL
# ═════════════════════════════════════════════════════════════════════


async def test_create_audit_entry(db: AsyncSession, test_company):
    entity_id = uuid.uuid4()
    entry = await create_audit_entry(
        db,
        action="delete",
        entity_type="employee",
        entity_id=entity_id,
        company_id=test_company["id"],
        actor_role="OWNER",
        old_values={"full_name": "Anil Sharma"},
    )
    await db.commit()

    stored = (
        await db.execute(select(AuditTrail).where(AuditTrail.entity_id == entity_id))
    ).scalar_one()
    assert stored.id == entry.id
    assert stored.action == "delete"
    assert stored.old_values == {"full_name": "Anil Sharma"}
    assert stored.new_values is None
