"""001 – Initial schema: companies, owners, supervisors, employees, attendance,
pay history, audit trail.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("subscription_status", ["active", "expired"]),
    ("supervisor_status", ["ACTIVE", "INACTIVE"]),
    ("employment_type", ["FIXED", "DAILY"]),
    ("employee_status", ["active", "inactive"]),
    ("attendance_status", ["P", "A"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. companies ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE companies (
            id                      UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name                    VARCHAR(200) NOT NULL,
            gst_no                  VARCHAR(20),
            address                 TEXT,
            subscription_plan       VARCHAR(50) DEFAULT 'trial',
            subscription_end_date   DATE,
            subscription_status     subscription_status DEFAULT 'active',
            created_at              TIMESTAMPTZ DEFAULT NOW(),
            updated_at              TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. owners (id = identity-provider user id) ────────────────────────
    op.execute("""
        CREATE TABLE owners (
            id              UUID PRIMARY KEY,
            company_id      UUID NOT NULL UNIQUE REFERENCES companies(id) ON DELETE CASCADE,
            full_name       VARCHAR(150) NOT NULL,
            email           VARCHAR(255) NOT NULL UNIQUE,
            phone           VARCHAR(15),
            created_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 3. supervisors ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE supervisors (
            id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            auth_user_id    UUID UNIQUE,
            company_id      UUID NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            owner_id        UUID REFERENCES owners(id),
            full_name       VARCHAR(150) NOT NULL,
            email           VARCHAR(255) NOT NULL UNIQUE,
            phone           VARCHAR(15),
            aadhar          VARCHAR(12),
            pan             VARCHAR(10),
            address         TEXT,
            status          supervisor_status DEFAULT 'ACTIVE',
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_supervisors_company_id ON supervisors (company_id)")

    # ── 4. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            company_id      UUID NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            supervisor_id   UUID REFERENCES supervisors(id) ON DELETE SET NULL,
            owner_id        UUID REFERENCES owners(id),
            full_name       VARCHAR(100) NOT NULL,
            mobile          VARCHAR(10) NOT NULL,
            aadhar          VARCHAR(12),
            pan             VARCHAR(10),
            address         VARCHAR(500),
            city            VARCHAR(100),
            state           VARCHAR(100),
            zipcode         VARCHAR(10),
            employment_type employment_type NOT NULL,
            monthly_salary  NUMERIC(12, 2) CHECK (monthly_salary >= 0),
            daily_rate      NUMERIC(12, 2) CHECK (daily_rate >= 0),
            join_date       DATE,
            status          employee_status NOT NULL DEFAULT 'active',
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_employee_company_mobile UNIQUE (company_id, mobile)
        )
    """)
    op.execute("CREATE INDEX ix_employees_company_status ON employees (company_id, status)")
    op.execute("CREATE INDEX ix_employees_supervisor_id ON employees (supervisor_id)")

    # ── 5. attendance_records ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id                      UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id             UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            company_id              UUID NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            date                    DATE NOT NULL,
            status                  attendance_status NOT NULL,
            in_time                 VARCHAR(5),
            out_time                VARCHAR(5),
            work_hours              NUMERIC(5, 2),
            marked_by_owner_id      UUID REFERENCES owners(id) ON DELETE SET NULL,
            marked_by_supervisor_id UUID REFERENCES supervisors(id) ON DELETE SET NULL,
            created_at              TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_employee_date UNIQUE (employee_id, date)
        )
    """)
    op.execute("CREATE INDEX ix_attendance_company_date ON attendance_records (company_id, date)")

    # ── 6. pay_history ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE pay_history (
            id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id     UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            company_id      UUID NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            month           DATE NOT NULL,
            present_days    INTEGER DEFAULT 0,
            absent_days     INTEGER DEFAULT 0,
            base_pay        NUMERIC(12, 2) DEFAULT 0,
            deductions      NUMERIC(12, 2) DEFAULT 0,
            final_pay       NUMERIC(12, 2) DEFAULT 0,
            finalized_by    UUID,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_pay_history_employee_month UNIQUE (employee_id, month)
        )
    """)
    op.execute("CREATE INDEX ix_pay_history_company_id ON pay_history (company_id)")

    # ── 7. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            company_id      UUID,
            actor_id        UUID,
            actor_role      VARCHAR(20),
            action          VARCHAR(50) NOT NULL,
            entity_type     VARCHAR(50) NOT NULL,
            entity_id       UUID NOT NULL,
            old_values      JSONB,
            new_values      JSONB,
            ip_address      VARCHAR(45),
            user_agent      TEXT,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_company_created ON audit_trail (company_id, created_at)")
    op.execute("CREATE INDEX ix_audit_trail_entity ON audit_trail (entity_type, entity_id)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "pay_history",
        "attendance_records",
        "employees",
        "supervisors",
        "owners",
        "companies",
    ]
    for table in tables:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
