"""Company router — account setup, company profile, subscription, supervisors,
platform admin.

Routes:
    /companies/setup              — Create company + owner on first sign-in
    /companies/me                 — Get / update the caller's company
    /companies/me/subscription    — Plan, expiry and renewal reminder
    /supervisors                  — List, invite (owner only)
    /supervisors/{id}             — Profile, update, deactivate
    /admin/companies              — All companies (platform admin)
    /admin/companies/{id}/subscription — Extend / expire a subscription
"""


import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.auth.dependencies import (
    RequestContext,
    get_request_context,
    get_token_claims,
    require_company_permission,
    require_permission,
)
from workforce.common.constants import SupervisorStatus
from workforce.common.exceptions import NotFoundException
from workforce.companies.schemas import (
    CompanyResponse,
    CompanySetupRequest,
    CompanyUpdate,
    SubscriptionUpdate,
    SupervisorInvite,
    SupervisorResponse,
    SupervisorUpdate,
)
from workforce.companies.service import (
    AdminService,
    CompanyService,
    SupervisorService,
    subscription_status,
)
from workforce.database import get_db

companies_router = APIRouter()
supervisors_router = APIRouter()
admin_router = APIRouter()


# ═════════════════════════════════════════════════════════════════════
# Company
# ═════════════════════════════════════════════════════════════════════


@companies_router.post("/setup", status_code=201)
async def setup_company(
    body: CompanySetupRequest,
    claims: dict[str, Any] = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    """Create the company and owner for a verified identity-provider user."""
    company = await CompanyService.setup(db, claims, body)
    return {
        "data": CompanyResponse.model_validate(company).model_dump(mode="json"),
        "message": "Company created successfully.",
    }


def _company_of(ctx: RequestContext):
    if ctx.company is None:
        raise NotFoundException("Company", str(ctx.company_id))
    return ctx.company


@companies_router.get("/me")
async def get_my_company(
    ctx: RequestContext = Depends(require_permission("company:read")),
):
    company = _company_of(ctx)
    return {"data": CompanyResponse.model_validate(company).model_dump(mode="json")}


@companies_router.patch("/me")
async def update_my_company(
    body: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_permission("company:update")),
):
    company = await CompanyService.update(db, ctx, body)
    return {
        "data": CompanyResponse.model_validate(company).model_dump(mode="json"),
        "message": "Company updated successfully.",
    }


@companies_router.get("/me/subscription")
async def get_subscription(
    ctx: RequestContext = Depends(get_request_context),
):
    """Available even after expiry so the client can show the renewal screen."""
    company = _company_of(ctx)
    return {"data": subscription_status(company).model_dump(mode="json")}


# ═════════════════════════════════════════════════════════════════════
# Supervisors (owner only)
# ═════════════════════════════════════════════════════════════════════

_manage = require_company_permission("supervisor:manage")


@supervisors_router.get("")
async def list_supervisors(
    status: Optional[SupervisorStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_manage),
):
    supervisors = await SupervisorService.list_supervisors(db, ctx, status=status)
    return {
        "data": [SupervisorResponse.model_validate(s).model_dump(mode="json") for s in supervisors],
    }


@supervisors_router.post("", status_code=201)
async def invite_supervisor(
    body: SupervisorInvite,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_manage),
):
    supervisor = await SupervisorService.invite(db, ctx, body)
    return {
        "data": SupervisorResponse.model_validate(supervisor).model_dump(mode="json"),
        "message": f"Supervisor {supervisor.email} invited.",
    }


@supervisors_router.get("/{supervisor_id}")
async def get_supervisor(
    supervisor_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_manage),
):
    profile = await SupervisorService.get_profile(db, ctx, supervisor_id)
    return {"data": profile.model_dump(mode="json")}


@supervisors_router.patch("/{supervisor_id}")
async def update_supervisor(
    supervisor_id: uuid.UUID,
    body: SupervisorUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_manage),
):
    supervisor = await SupervisorService.update(db, ctx, supervisor_id, body)
    return {
        "data": SupervisorResponse.model_validate(supervisor).model_dump(mode="json"),
        "message": "Supervisor updated successfully.",
    }


@supervisors_router.delete("/{supervisor_id}")
async def deactivate_supervisor(
    supervisor_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(_manage),
):
    supervisor = await SupervisorService.deactivate(db, ctx, supervisor_id)
    return {
        "data": SupervisorResponse.model_validate(supervisor).model_dump(mode="json"),
        "message": "Supervisor deactivated.",
    }


# ═════════════════════════════════════════════════════════════════════
# Platform admin
# ═════════════════════════════════════════════════════════════════════


@admin_router.get("/companies")
async def admin_list_companies(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_permission("platform:companies")),
):
    items = await AdminService.list_companies(db)
    return {"data": [item.model_dump(mode="json") for item in items]}


@admin_router.patch("/companies/{company_id}/subscription")
async def admin_update_subscription(
    company_id: uuid.UUID,
    body: SubscriptionUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_permission("platform:subscriptions")),
):
    company = await AdminService.update_subscription(db, ctx, company_id, body)
    return {
        "data": CompanyResponse.model_validate(company).model_dump(mode="json"),
        "message": "Subscription updated.",
    }
