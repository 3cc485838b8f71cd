"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.database import Base

_DIRECTIONS = {"asc": asc, "desc": desc}


def parse_order_by(model: type[Base], order_by: str | None) -> list[tuple[str, str]]:
    """Parse "field:dir[,field:dir...]" into (field, direction) pairs.

    Unknown fields are dropped, a missing or unknown direction means "asc",
    and a field listed twice keeps its first position.
    """
    keys: list[tuple[str, str]] = []
    seen: set[str] = set()
    for part in (order_by or "").split(","):
        name, _, direction = part.strip().partition(":")
        if name not in model.__mapper__.columns or name in seen:
            continue
        seen.add(name)
        keys.append((name, direction if direction in _DIRECTIONS else "asc"))
    return keys


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        order_by: Comma separated "field:direction" keys, e.g.
            "payment_status:asc,created_at:desc". When no key names a mapped
            column the defaults are used.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").
    """
    keys = parse_order_by(model, order_by) or [(default_field, default_direction)]
    return query.order_by(*(_DIRECTIONS[d](getattr(model, f)) for f, d in keys))
