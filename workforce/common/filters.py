"""Query helpers shared by list endpoints: filter dicts, sort strings, search."""

from __future__ import annotations

import operator
from typing import Any, Callable, Optional, Sequence

from sqlalchemy import Select, String, and_, cast, or_
from sqlalchemy.orm import InstrumentedAttribute

# Filter-key suffix → condition builder. A key without a suffix is ``==``.
_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "ilike": lambda col, value: col.ilike(f"%{value}%"),
    "from": operator.ge,
    "to": operator.le,
    "in": lambda col, value: col.in_(value),
}


def _split_key(key: str) -> tuple[str, Callable[[Any, Any], Any]]:
    name, sep, suffix = key.rpartition("__")
    if sep and suffix in _OPERATORS:
        return name, _OPERATORS[suffix]
    return key, operator.eq


def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Narrow *query* by a dict such as ``{"status": ..., "join_date__from": ...}``.

    Recognised suffixes are ``__ilike`` (substring, any case), ``__from``
    (``>=``), ``__to`` (``<=``) and ``__in``. ``None`` values and keys that
    name no column on *model* are skipped.
    """
    conditions = []
    for key, value in filters.items():
        if value is None:
            continue
        name, build = _split_key(key)
        col = _get_column(model, name)
        if col is not None:
            conditions.append(build(col, value))

    return query.where(and_(*conditions)) if conditions else query


def apply_sorting(query: Select, model: Any, sort: Optional[str]) -> Select:
    """ORDER BY a ``"full_name"`` / ``"-join_date"`` style sort string."""
    if not sort:
        return query
    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if sort.startswith("-") else col.asc())


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Keep rows where any of *columns* contains *search*, ignoring case."""
    term = (search or "").strip()
    if not term:
        return query

    matches = [
        cast(col, String).ilike(f"%{term}%")
        for col in (_get_column(model, name) for name in columns)
        if col is not None
    ]
    return query.where(or_(*matches)) if matches else query


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Mapped attribute *name* on *model*, or ``None``."""
    return getattr(model, name, None)
