"""Company service layer — account setup, subscription, supervisors, admin."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.auth.dependencies import RequestContext
from workforce.common.audit import create_audit_entry
from workforce.common.constants import SubscriptionStatus, SupervisorStatus, UserRole
from workforce.common.exceptions import ConflictError, NotFoundException, ValidationException
from workforce.companies.models import Company, Owner, Supervisor
from workforce.companies.schemas import (
    AdminCompanyItem,
    CompanySetupRequest,
    CompanyUpdate,
    SubscriptionResponse,
    SubscriptionUpdate,
    SupervisorInvite,
    SupervisorProfile,
    SupervisorUpdate,
)
from workforce.config import settings
from workforce.employees.models import Employee

logger = logging.getLogger(__name__)


def subscription_status(company: Company, today: Optional[date] = None) -> SubscriptionResponse:
    """Plan, end date, days left and whether the renewal reminder is due."""
    today = today or date.today()
    days_remaining = None
    if company.subscription_end_date is not None:
        days_remaining = (company.subscription_end_date - today).days
    show_reminder = (
        days_remaining is not None
        and 0 < days_remaining <= settings.SUBSCRIPTION_REMINDER_DAYS
    )
    return SubscriptionResponse(
        plan=company.subscription_plan,
        status=company.subscription_status,
        end_date=company.subscription_end_date,
        is_active=company.is_subscription_active(today),
        days_remaining=days_remaining,
        show_reminder=show_reminder,
    )


# ═════════════════════════════════════════════════════════════════════
# CompanyService
# ═════════════════════════════════════════════════════════════════════


class CompanyService:

    @staticmethod
    async def setup(
        db: AsyncSession,
        claims: dict[str, Any],
        data: CompanySetupRequest,
    ) -> Company:
        """Create the company and its owner for a freshly verified user."""
        user_id: uuid.UUID = claims["sub"]
        email = (claims.get("email") or "").strip().lower()
        if not email:
            raise ValidationException({"email": ["Token carries no e-mail address."]})

        if await db.get(Owner, user_id) is not None:
            raise ConflictError("owner", str(user_id))
        supervisor = await db.execute(
            select(Supervisor.id).where(
                (Supervisor.auth_user_id == user_id) | (Supervisor.email == email)
            )
        )
        if supervisor.first() is not None:
            raise ConflictError("email", email)

        company = Company(
            name=data.company_name,
            gst_no=data.gst_no,
            address=data.address,
            subscription_plan="trial",
            subscription_status=SubscriptionStatus.active,
            subscription_end_date=date.today() + timedelta(days=settings.TRIAL_DAYS),
        )
        db.add(company)
        await db.flush()

        owner = Owner(
            id=user_id,
            company_id=company.id,
            full_name=data.owner_full_name,
            email=email,
            phone=data.phone,
        )
        db.add(owner)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("email", email)

        await create_audit_entry(
            db,
            action="create",
            entity_type="company",
            entity_id=company.id,
            company_id=company.id,
            actor_id=user_id,
            actor_role=UserRole.owner.value,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Company %s set up by owner %s", company.id, user_id)
        return company

    @staticmethod
    async def update(
        db: AsyncSession,
        ctx: RequestContext,
        data: CompanyUpdate,
    ) -> Company:
        company = await db.get(Company, ctx.company_id)
        if company is None:
            raise NotFoundException("Company", str(ctx.company_id))

        changes = data.model_dump(exclude_unset=True)
        old_values = {k: getattr(company, k) for k in changes}
        for key, value in changes.items():
            setattr(company, key, value)
        company.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="company",
            entity_id=company.id,
            company_id=company.id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            old_values=old_values,
            new_values=changes,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        return company


# ═════════════════════════════════════════════════════════════════════
# SupervisorService
# ═════════════════════════════════════════════════════════════════════


class SupervisorService:

    @staticmethod
    async def list_supervisors(
        db: AsyncSession,
        ctx: RequestContext,
        *,
        status: Optional[SupervisorStatus] = None,
    ) -> list[Supervisor]:
        query = select(Supervisor).where(Supervisor.company_id == ctx.company_id)
        if status is not None:
            query = query.where(Supervisor.status == status)
        result = await db.execute(query.order_by(Supervisor.full_name))
        return list(result.scalars().all())

    @staticmethod
    async def get_supervisor(
        db: AsyncSession,
        ctx: RequestContext,
        supervisor_id: uuid.UUID,
    ) -> Supervisor:
        supervisor = await db.get(Supervisor, supervisor_id)
        if supervisor is None or supervisor.company_id != ctx.company_id:
            raise NotFoundException("Supervisor", str(supervisor_id))
        return supervisor

    @staticmethod
    async def get_profile(
        db: AsyncSession,
        ctx: RequestContext,
        supervisor_id: uuid.UUID,
    ) -> SupervisorProfile:
        """Supervisor detail with the number of employees assigned to them."""
        supervisor = await SupervisorService.get_supervisor(db, ctx, supervisor_id)
        count = (
            await db.execute(
                select(func.count())
                .select_from(Employee)
                .where(Employee.supervisor_id == supervisor.id)
            )
        ).scalar() or 0
        profile = SupervisorProfile.model_validate(supervisor)
        profile.employee_count = count
        return profile

    @staticmethod
    async def invite(
        db: AsyncSession,
        ctx: RequestContext,
        data: SupervisorInvite,
    ) -> Supervisor:
        """Create the supervisor record; the account is linked on first sign-in.

        Sending the invitation e-mail is left to the identity provider.
        """
        email = str(data.email)
        existing = await db.execute(select(Supervisor.id).where(Supervisor.email == email))
        owner_clash = await db.execute(select(Owner.id).where(Owner.email == email))
        if existing.first() is not None or owner_clash.first() is not None:
            raise ConflictError("email", email)

        supervisor = Supervisor(
            company_id=ctx.company_id,
            owner_id=ctx.owner_id,
            full_name=data.full_name,
            email=email,
            phone=data.phone,
            aadhar=data.aadhar,
            pan=data.pan,
            address=data.address,
            status=SupervisorStatus.active,
        )
        db.add(supervisor)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="supervisor",
            entity_id=supervisor.id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            new_values=data.model_dump(mode="json"),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info("Supervisor %s invited to company %s", email, ctx.company_id)
        return supervisor

    @staticmethod
    async def update(
        db: AsyncSession,
        ctx: RequestContext,
        supervisor_id: uuid.UUID,
        data: SupervisorUpdate,
    ) -> Supervisor:
        supervisor = await SupervisorService.get_supervisor(db, ctx, supervisor_id)
        changes = data.model_dump(exclude_unset=True)
        old_values = {k: getattr(supervisor, k) for k in changes}
        for key, value in changes.items():
            setattr(supervisor, key, value)
        supervisor.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="supervisor",
            entity_id=supervisor.id,
            company_id=ctx.company_id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            old_values={k: getattr(v, "value", v) for k, v in old_values.items()},
            new_values=data.model_dump(mode="json", exclude_unset=True),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        return supervisor

    @staticmethod
    async def deactivate(
        db: AsyncSession,
        ctx: RequestContext,
        supervisor_id: uuid.UUID,
    ) -> Supervisor:
        """Block sign-in; the supervisor's employees stay assigned."""
        return await SupervisorService.update(
            db, ctx, supervisor_id, SupervisorUpdate(status=SupervisorStatus.inactive),
        )


# ═════════════════════════════════════════════════════════════════════
# AdminService
# ═════════════════════════════════════════════════════════════════════


class AdminService:

    @staticmethod
    async def list_companies(db: AsyncSession) -> list[AdminCompanyItem]:
        employee_counts = dict(
            (
                await db.execute(
                    select(Employee.company_id, func.count()).group_by(Employee.company_id)
                )
            ).all()
        )
        supervisor_counts = dict(
            (
                await db.execute(
                    select(Supervisor.company_id, func.count()).group_by(Supervisor.company_id)
                )
            ).all()
        )
        owners = {
            o.company_id: o
            for o in (await db.execute(select(Owner))).scalars().all()
        }
        companies = (
            await db.execute(select(Company).order_by(Company.created_at.desc()))
        ).scalars().all()

        items = []
        for company in companies:
            item = AdminCompanyItem.model_validate(company)
            owner = owners.get(company.id)
            if owner is not None:
                item.owner_name = owner.full_name
                item.owner_email = owner.email
            item.employee_count = employee_counts.get(company.id, 0)
            item.supervisor_count = supervisor_counts.get(company.id, 0)
            items.append(item)
        return items

    @staticmethod
    async def update_subscription(
        db: AsyncSession,
        ctx: RequestContext,
        company_id: uuid.UUID,
        data: SubscriptionUpdate,
    ) -> Company:
        company = await db.get(Company, company_id)
        if company is None:
            raise NotFoundException("Company", str(company_id))

        old_values = {
            "plan": company.subscription_plan,
            "end_date": company.subscription_end_date.isoformat() if company.subscription_end_date else None,
            "status": company.subscription_status.value,
        }
        if data.plan is not None:
            company.subscription_plan = data.plan
        if data.end_date is not None:
            company.subscription_end_date = data.end_date
        if data.extend_days is not None:
            base = max(company.subscription_end_date or date.today(), date.today())
            company.subscription_end_date = base + timedelta(days=data.extend_days)
            company.subscription_status = SubscriptionStatus.active
        if data.status is not None:
            company.subscription_status = data.status
        company.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update_subscription",
            entity_type="company",
            entity_id=company.id,
            company_id=company.id,
            actor_id=ctx.actor_id,
            actor_role=ctx.role.value,
            old_values=old_values,
            new_values=data.model_dump(mode="json", exclude_unset=True),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        logger.info(
            "Subscription of company %s updated by admin %s: %s",
            company.id, ctx.user_id, data.model_dump(mode="json", exclude_unset=True),
        )
        return company
