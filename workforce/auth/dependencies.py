"""Auth dependencies — identity-provider JWT validation, request context, RBAC.

Tokens are issued by the hosted identity provider; this service only
verifies them and maps the subject onto an owner, a supervisor or a
platform admin. The result is an explicit ``RequestContext`` that routers
pass down to services.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.common.constants import PERMISSIONS, SupervisorStatus, UserRole
from workforce.common.exceptions import ForbiddenException, SubscriptionExpiredException
from workforce.companies.models import Company, Owner, Supervisor
from workforce.config import settings
from workforce.database import get_db

logger = logging.getLogger(__name__)


# ── Request context ─────────────────────────────────────────────────


@dataclass
class RequestContext:
    """Who is calling, in which company, and with which scope."""

    user_id: uuid.UUID
    role: UserRole
    email: Optional[str] = None
    full_name: str = ""
    company_id: Optional[uuid.UUID] = None
    owner_id: Optional[uuid.UUID] = None
    supervisor_id: Optional[uuid.UUID] = None
    company: Optional[Company] = field(default=None, repr=False)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.owner

    @property
    def is_supervisor(self) -> bool:
        return self.role == UserRole.supervisor

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def actor_id(self) -> uuid.UUID:
        """Owner or supervisor row id; the raw user id for admins."""
        return self.supervisor_id or self.owner_id or self.user_id

    def has_permission(self, permission: str) -> bool:
        return permission in PERMISSIONS.get(self.role, [])


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Token verification ──────────────────────────────────────────────


async def get_token_claims(request: Request) -> dict[str, Any]:
    """Verify the identity provider's JWT and return its claims."""
    token = _extract_bearer(request)
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    try:
        payload["sub"] = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token subject.")
    return payload


def _metadata_role(claims: dict[str, Any]) -> Optional[str]:
    metadata = claims.get("user_metadata") or {}
    return metadata.get("role")


# ── Core dependency ─────────────────────────────────────────────────


async def get_request_context(
    request: Request,
    claims: dict[str, Any] = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """Resolve the token subject into an owner, supervisor or admin context.

    An invited supervisor has no ``auth_user_id`` until the first sign-in;
    the account is linked here by matching the token's e-mail.
    """
    user_id: uuid.UUID = claims["sub"]
    email: Optional[str] = claims.get("email")
    client = request.client.host if request.client else None
    user_agent = request.headers.get("User-Agent")

    owner = await db.get(Owner, user_id)
    if owner is not None:
        return RequestContext(
            user_id=user_id,
            role=UserRole.owner,
            email=owner.email,
            full_name=owner.full_name,
            company_id=owner.company_id,
            owner_id=owner.id,
            company=await db.get(Company, owner.company_id),
            ip_address=client,
            user_agent=user_agent,
        )

    result = await db.execute(
        select(Supervisor).where(Supervisor.auth_user_id == user_id)
    )
    supervisor = result.scalars().first()
    if supervisor is None and email:
        result = await db.execute(
            select(Supervisor).where(
                Supervisor.auth_user_id.is_(None),
                Supervisor.email == email,
            )
        )
        supervisor = result.scalars().first()
        if supervisor is not None:
            supervisor.auth_user_id = user_id
            await db.flush()
            logger.info("Linked supervisor %s to auth user %s", supervisor.id, user_id)

    if supervisor is not None:
        if supervisor.status != SupervisorStatus.active:
            raise ForbiddenException(detail="Supervisor account is inactive.")
        return RequestContext(
            user_id=user_id,
            role=UserRole.supervisor,
            email=supervisor.email,
            full_name=supervisor.full_name,
            company_id=supervisor.company_id,
            owner_id=supervisor.owner_id,
            supervisor_id=supervisor.id,
            company=await db.get(Company, supervisor.company_id),
            ip_address=client,
            user_agent=user_agent,
        )

    if _metadata_role(claims) == UserRole.admin.value:
        return RequestContext(
            user_id=user_id,
            role=UserRole.admin,
            email=email,
            ip_address=client,
            user_agent=user_agent,
        )

    raise ForbiddenException(
        detail="No company account is linked to this user. Complete account setup first.",
    )


# ── Permission-based dependency ─────────────────────────────────────


def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(
        ctx: RequestContext = Depends(get_request_context),
    ) -> RequestContext:
        if not ctx.has_permission(permission):
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{ctx.role.value}'.",
            )
        return ctx

    return _check


# ── Subscription gate ───────────────────────────────────────────────


async def require_active_subscription(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """Block company users whose subscription has lapsed (HTTP 402)."""
    if ctx.company is not None and not ctx.company.is_subscription_active(date.today()):
        raise SubscriptionExpiredException(ctx.company_id)
    return ctx


def require_company_permission(permission: str) -> Callable:
    """``require_permission`` plus the subscription gate."""

    async def _check(
        ctx: RequestContext = Depends(require_active_subscription),
    ) -> RequestContext:
        if not ctx.has_permission(permission):
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{ctx.role.value}'.",
            )
        return ctx

    return _check
