"""Company ORM models: Company, Owner, Supervisor.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
Every tenant-scoped row in the schema hangs off ``companies.id``.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce.common.constants import SubscriptionStatus, SupervisorStatus
from workforce.database import Base, enum_values

if TYPE_CHECKING:
    from workforce.employees.models import Employee


# ═════════════════════════════════════════════════════════════════════
# Company
# ═════════════════════════════════════════════════════════════════════


class Company(Base):
    """A tenant: one owner, many supervisors and employees."""

    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    gst_no: Mapped[Optional[str]] = mapped_column(sa.String(20))
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    subscription_plan: Mapped[str] = mapped_column(
        sa.String(50), default="trial",
    )
    subscription_end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        sa.Enum(
            SubscriptionStatus, name="subscription_status",
            values_callable=enum_values,
        ),
        default=SubscriptionStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    owner: Mapped[Optional[Owner]] = relationship(
        back_populates="company", uselist=False,
    )
    supervisors: Mapped[list[Supervisor]] = relationship(
        back_populates="company",
    )
    employees: Mapped[list[Employee]] = relationship(
        back_populates="company",
    )

    def is_subscription_active(self, today: date) -> bool:
        """True unless the subscription is flagged expired or past its end date."""
        if self.subscription_status == SubscriptionStatus.expired:
            return False
        if self.subscription_end_date is None:
            return True
        return self.subscription_end_date >= today

    def __repr__(self) -> str:
        return f"<Company {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Owner
# ═════════════════════════════════════════════════════════════════════


class Owner(Base):
    """Company owner. ``id`` is the identity provider's user id."""

    __tablename__ = "owners"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(15))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    company: Mapped[Company] = relationship(back_populates="owner")

    def __repr__(self) -> str:
        return f"<Owner {self.email!r}>"


# ═════════════════════════════════════════════════════════════════════
# Supervisor
# ═════════════════════════════════════════════════════════════════════


class Supervisor(Base):
    """Supervisor invited by an owner.

    ``auth_user_id`` stays NULL until the invitee first signs in; the
    account is then linked by e-mail.
    """

    __tablename__ = "supervisors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    auth_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), unique=True,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("owners.id"),
    )
    full_name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(15))
    aadhar: Mapped[Optional[str]] = mapped_column(sa.String(12))
    pan: Mapped[Optional[str]] = mapped_column(sa.String(10))
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[SupervisorStatus] = mapped_column(
        sa.Enum(
            SupervisorStatus, name="supervisor_status",
            values_callable=enum_values,
        ),
        default=SupervisorStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    company: Mapped[Company] = relationship(back_populates="supervisors")

    @property
    def is_linked(self) -> bool:
        """True once the invitee has signed in at least once."""
        return self.auth_user_id is not None

    def __repr__(self) -> str:
        return f"<Supervisor {self.email!r}>"
