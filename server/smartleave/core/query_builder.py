"""
Reusable query builder functions shared by the leave stores.
"""
from typing import Optional, List, Tuple, TypeVar, Iterable
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

ModelType = TypeVar('ModelType')


async def get_paginated_results(
    db: AsyncSession,
    query,
    skip: int = 0,
    limit: int = 100,
    order_by=None,
) -> Tuple[List, int]:
    """
    Execute a paginated query and return results with total count.

    Args:
        db: Database session
        query: SQLAlchemy select query
        skip: Number of records to skip
        limit: Maximum number of records to return
        order_by: Column(s) to order by (optional)

    Returns:
        Tuple of (results_list, total_count)
    """
    count_query = select(func.count()).select_from(query.subquery())
    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    if order_by is not None:
        if isinstance(order_by, (list, tuple)):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    result = await db.execute(query.offset(skip).limit(limit))
    items = result.scalars().all()

    return list(items), total


def filter_by_owner(query, model: type[ModelType], user_id: UUID):
    """Add a user_id filter to a query."""
    return query.where(model.user_id == user_id)


def filter_by_status(query, model: type[ModelType], status, status_column_name: str = "status"):
    """Add a status equality filter to a query."""
    status_column = getattr(model, status_column_name)
    return query.where(status_column == status)


def exclude_statuses(query, model: type[ModelType], statuses: Iterable, status_column_name: str = "status"):
    """Drop rows whose status is in ``statuses``; no-op when empty."""
    statuses = list(statuses)
    if not statuses:
        return query
    status_column = getattr(model, status_column_name)
    return query.where(status_column.not_in(statuses))


def build_owner_filtered_query(
    model: type[ModelType],
    user_id: Optional[UUID] = None,
    status=None,
):
    """Base select for a model, optionally narrowed to one owner and one status."""
    query = select(model)
    if user_id is not None:
        query = filter_by_owner(query, model, user_id)
    if status is not None:
        query = filter_by_status(query, model, status)
    return query
