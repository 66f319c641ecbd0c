"""
Pagination Utilities

Page/limit pagination over SQLAlchemy selects. Items and the total are read
by one statement (a COUNT(*) OVER () window column) so the page and the
total always describe the same snapshot.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.config import settings
from taskhub.exceptions import ValidationError

logger = logging.getLogger(__name__)


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    limit: int


@dataclass
class Page:
    items: list[Any]
    pagination: Pagination


def validate_page_params(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("page must be >= 1", field="page")
    if limit < 1 or limit > settings.max_page_size:
        raise ValidationError(f"limit must be between 1 and {settings.max_page_size}", field="limit")


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_items=total,
        limit=limit,
    )


async def paginate(
    db: AsyncSession,
    statement: Select,
    order_by: list,
    page: int = 1,
    limit: int = 20,
) -> Page:
    """
    Run *statement* (a select of one ORM entity, filters applied) for one page.

    Args:
        db: Database session
        statement: Filtered select, without ordering or limits
        order_by: Ordering clauses; should end with a unique column
        page: 1-based page number
        limit: Page size

    Returns:
        Page with the ORM objects and pagination metadata
    """
    validate_page_params(page, limit)

    windowed = (
        statement.add_columns(func.count().over().label("total_count"))
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(windowed)
    rows = result.all()

    if rows:
        total = rows[0].total_count
    elif page == 1:
        total = 0
    else:
        # Page past the end: the window column has nothing to report on
        count_result = await db.execute(select(func.count()).select_from(statement.order_by(None).subquery()))
        total = count_result.scalar() or 0

    items = [row[0] for row in rows]
    return Page(items=items, pagination=build_pagination(total, page, limit))
