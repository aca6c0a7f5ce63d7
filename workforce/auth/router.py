"""Auth router — identity of the current caller.

Sign-up, sign-in and token refresh happen at the identity provider; this
service only reports how the verified token maps onto its own accounts.
"""


from fastapi import APIRouter, Depends

from workforce.auth.dependencies import RequestContext, get_request_context
from workforce.auth.schemas import MeResponse
from workforce.common.constants import PERMISSIONS

router = APIRouter()


@router.get("/me", response_model=MeResponse)
async def me(ctx: RequestContext = Depends(get_request_context)):
    """Return the caller's role, company and permissions."""
    return MeResponse(
        user_id=ctx.user_id,
        role=ctx.role.value,
        email=ctx.email,
        full_name=ctx.full_name,
        company_id=ctx.company_id,
        company_name=ctx.company.name if ctx.company else None,
        owner_id=ctx.owner_id,
        supervisor_id=ctx.supervisor_id,
        permissions=PERMISSIONS.get(ctx.role, []),
    )
