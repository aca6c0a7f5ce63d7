"""Dashboard router — landing-page counters."""


from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.auth.dependencies import RequestContext, require_company_permission
from workforce.dashboard.service import DashboardService
from workforce.database import get_db

router = APIRouter()


@router.get("/summary")
async def dashboard_summary(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_company_permission("dashboard:read")),
):
    """Employee counts, today's attendance and the last 7 days' trend."""
    summary = await DashboardService.get_summary(db, ctx)
    return {"data": summary.model_dump(mode="json")}
