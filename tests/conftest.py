"""Fixtures for the workforce test suite.

Tables live in an in-memory SQLite database (aiosqlite, one shared
connection). Bearer tokens are signed with the same secret the app
verifies, in place of the hosted identity provider.
"""

from __future__ import annotations

import os

# pydantic-settings reads JWT_SECRET at import time
os.environ.setdefault("JWT_SECRET", "workforce-test-secret")

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

from workforce.attendance.models import AttendanceRecord
from workforce.common.audit import AuditTrail  # noqa: F401  (registers the table)
from workforce.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    EmploymentType,
    SubscriptionStatus,
    SupervisorStatus,
)
from workforce.common.rate_limit import limiter
from workforce.companies.models import Company, Owner, Supervisor
from workforce.config import settings
from workforce.database import Base, get_db
from workforce.employees.models import Employee, PayHistory  # noqa: F401
from workforce.main import create_app


# ── PostgreSQL types on SQLite ──────────────────────────────────────

@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


engine = create_async_engine(
    "sqlite+aiosqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionFactory = async_sessionmaker(engine, expire_on_commit=False)


@event.listens_for(engine.sync_engine, "connect")
def _add_pg_functions(dbapi_conn, connection_record):
    """Server defaults in the models call NOW() and gen_random_uuid()."""
    dbapi_conn.create_function("NOW", 0, lambda: datetime.now(timezone.utc).isoformat())
    dbapi_conn.create_function("gen_random_uuid", 0, lambda: str(uuid.uuid4()))


@pytest.fixture(autouse=True)
async def _setup_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Export and import limits are per test, not per session."""
    limiter.reset()
    yield


async def _override_get_db() -> AsyncIterator[AsyncSession]:
    async with TestSessionFactory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


# ── App and client ──────────────────────────────────────────────────

@pytest.fixture
async def app():
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Session for seeding and inspecting rows directly."""
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Row factories ───────────────────────────────────────────────────

def _make_company(
    *,
    name: str = "Shree Textiles",
    end_date: Optional[date] = None,
    status: SubscriptionStatus = SubscriptionStatus.active,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        subscription_plan="trial",
        subscription_end_date=end_date or date.today() + timedelta(days=30),
        subscription_status=status,
    )


def _make_owner(company_id: uuid.UUID, *, email: str = "owner@shree.example.com") -> dict:
    return dict(
        id=uuid.uuid4(),
        company_id=company_id,
        full_name="Ramesh Patel",
        email=email,
        phone="9800000000",
    )


def _make_supervisor(
    company_id: uuid.UUID,
    owner_id: Optional[uuid.UUID] = None,
    *,
    email: str = "supervisor@shree.example.com",
    full_name: str = "Suresh Kumar",
    auth_user_id: Optional[uuid.UUID] = None,
    status: SupervisorStatus = SupervisorStatus.active,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        auth_user_id=auth_user_id if auth_user_id is not None else uuid.uuid4(),
        company_id=company_id,
        owner_id=owner_id,
        full_name=full_name,
        email=email,
        status=status,
    )


def _make_employee(
    company_id: uuid.UUID,
    *,
    full_name: str = "Anil Sharma",
    mobile: str = "9876500001",
    employment_type: EmploymentType = EmploymentType.fixed,
    monthly_salary: Optional[Decimal] = Decimal("30000"),
    daily_rate: Optional[Decimal] = None,
    supervisor_id: Optional[uuid.UUID] = None,
    status: EmployeeStatus = EmployeeStatus.active,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        company_id=company_id,
        supervisor_id=supervisor_id,
        full_name=full_name,
        mobile=mobile,
        employment_type=employment_type,
        monthly_salary=monthly_salary if employment_type == EmploymentType.fixed else None,
        daily_rate=daily_rate if employment_type == EmploymentType.daily else None,
        join_date=date(2024, 1, 15),
        status=status,
    )


def _make_attendance(
    employee_id: uuid.UUID,
    company_id: uuid.UUID,
    day: date,
    *,
    status: AttendanceStatus = AttendanceStatus.present,
    in_time: Optional[str] = "09:00",
    out_time: Optional[str] = "17:00",
    work_hours: Optional[Decimal] = Decimal("8.00"),
    marked_by_owner_id: Optional[uuid.UUID] = None,
    marked_by_supervisor_id: Optional[uuid.UUID] = None,
) -> dict:
    present = status == AttendanceStatus.present
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        company_id=company_id,
        date=day,
        status=status,
        in_time=in_time if present else None,
        out_time=out_time if present else None,
        work_hours=work_hours if present else None,
        marked_by_owner_id=marked_by_owner_id,
        marked_by_supervisor_id=marked_by_supervisor_id,
    )


async def _insert(db: AsyncSession, model, data: dict) -> dict:
    db.add(model(**data))
    await db.commit()
    return data


@pytest.fixture
async def test_company(db) -> dict:
    return await _insert(db, Company, _make_company())


@pytest.fixture
async def test_owner(db, test_company) -> dict:
    return await _insert(db, Owner, _make_owner(test_company["id"]))


@pytest.fixture
async def test_supervisor(db, test_company, test_owner) -> dict:
    return await _insert(
        db, Supervisor, _make_supervisor(test_company["id"], test_owner["id"]),
    )


@pytest.fixture
async def fixed_employee(db, test_company, test_owner) -> dict:
    return await _insert(db, Employee, _make_employee(test_company["id"]))


@pytest.fixture
async def daily_employee(db, test_company, test_supervisor) -> dict:
    """DAILY worker (800/day) assigned to ``test_supervisor``."""
    return await _insert(
        db,
        Employee,
        _make_employee(
            test_company["id"],
            full_name="Bhavna Desai",
            mobile="9876500002",
            employment_type=EmploymentType.daily,
            daily_rate=Decimal("800"),
            supervisor_id=test_supervisor["id"],
        ),
    )


@pytest.fixture
async def add_attendance(db):
    """Insert attendance rows: ``await add_attendance(employee, day, **kw)``."""

    async def _add(employee: dict, day: date, **kwargs: Any) -> dict:
        return await _insert(
            db,
            AttendanceRecord,
            _make_attendance(employee["id"], employee["company_id"], day, **kwargs),
        )

    return _add


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    *,
    email: Optional[str] = None,
    user_metadata: Optional[dict] = None,
    expired: bool = False,
    audience: Optional[str] = None,
) -> str:
    """Generate an identity-provider style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(user_id),
        "aud": audience or settings.JWT_AUDIENCE,
        "email": email,
        "user_metadata": user_metadata or {},
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(test_owner) -> dict[str, str]:
    return bearer(create_access_token(test_owner["id"], email=test_owner["email"]))


@pytest.fixture
def supervisor_headers(test_supervisor) -> dict[str, str]:
    return bearer(
        create_access_token(test_supervisor["auth_user_id"], email=test_supervisor["email"]),
    )


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer(
        create_access_token(
            uuid.uuid4(), email="admin@platform.example.com", user_metadata={"role": "ADMIN"},
        ),
    )
