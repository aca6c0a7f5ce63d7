"""Page/size/sort query parameters and the ``{"data", "meta"}`` list envelope."""

from __future__ import annotations

import math
from typing import Any, Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from workforce.common.filters import apply_sorting

T = TypeVar("T")


class PaginationParams:
    """List-endpoint dependency: ``pagination: PaginationParams = Depends()``."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        sort: Optional[str] = Query(None, description='Column name, "-" prefix for descending'),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "PaginationMeta":
        pages = math.ceil(total / params.page_size)
        return cls(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=pages,
            has_next=params.page < pages,
            has_prev=params.page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    data: Sequence[T]
    meta: PaginationMeta


async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any = None,
) -> PaginatedResponse:
    """Run one page of *query* plus a COUNT over the unpaged query.

    ``params.sort`` is resolved against *model* and appended to any
    ORDER BY already on the query.
    """
    if model is not None:
        query = apply_sorting(query, model, params.sort)

    total = (
        await session.execute(select(func.count()).select_from(query.order_by(None).subquery()))
    ).scalar_one()
    page = await session.execute(query.offset(params.offset).limit(params.page_size))

    return PaginatedResponse(
        data=page.scalars().all(),
        meta=PaginationMeta.build(params, total),
    )
