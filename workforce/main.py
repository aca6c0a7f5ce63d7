"""Workforce API entry point: ``uvicorn workforce.main:app``."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from workforce.attendance.router import router as attendance_router
from workforce.auth.router import router as auth_router
from workforce.common.exceptions import register_exception_handlers
from workforce.common.rate_limit import limiter
from workforce.companies.router import admin_router, companies_router, supervisors_router
from workforce.config import settings
from workforce.dashboard.router import router as dashboard_router
from workforce.database import engine
from workforce.employees.router import router as employees_router
from workforce.reports.router import router as reports_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
API_PREFIX = "/api/v1"

ROUTERS = [
    (auth_router, "/auth", "auth"),
    (companies_router, "/companies", "companies"),
    (supervisors_router, "/supervisors", "supervisors"),
    (admin_router, "/admin", "admin"),
    (employees_router, "/employees", "employees"),
    (attendance_router, "/attendance", "attendance"),
    (reports_router, "/reports", "reports"),
    (dashboard_router, "/dashboard", "dashboard"),
]


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Workforce API starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("Workforce API stopped")


def create_app() -> FastAPI:
    """Build the app: problem+json errors, rate limits, CORS and the /api/v1 routers."""
    configure_logging()
    show_docs = settings.ENVIRONMENT != "production"

    app = FastAPI(
        title="Workforce",
        description="Attendance, wage reports and employee records for small companies",
        version=VERSION,
        docs_url="/api/docs" if show_docs else None,
        redoc_url="/api/redoc" if show_docs else None,
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(f"{API_PREFIX}/health", tags=["system"])
    async def health():
        """Liveness check; needs no token."""
        return {"status": "healthy", "version": VERSION, "environment": settings.ENVIRONMENT}

    for router, path, tag in ROUTERS:
        app.include_router(router, prefix=f"{API_PREFIX}{path}", tags=[tag])

    return app


app = create_app()
