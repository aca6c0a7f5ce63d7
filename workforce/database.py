"""Database wiring: async engine, session dependency and the model base."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from workforce.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base shared by every workforce table."""


def enum_values(enum_cls) -> list[str]:
    """``values_callable`` for ``sa.Enum`` so rows store enum values, not names."""
    return [member.value for member in enum_cls]


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session: commit when the handler returns, roll back if it raises."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()
