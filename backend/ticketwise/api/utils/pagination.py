"""
Pagination Helpers - paging and search filters
"""
from typing import TypeVar, Any, Optional, Tuple, List
from sqlalchemy.orm import Query
from sqlalchemy import or_

T = TypeVar('T')


def paginate_query(
    query: Query,
    page: int = 1,
    page_size: int = 20,
    order_by: Any = None
) -> Tuple[List[T], int]:
    """
    Applies paging to a query and returns items + total.

    Args:
        query: SQLAlchemy query
        page: Page number (1-indexed)
        page_size: Page size
        order_by: Ordering column(s), single or tuple

    Returns:
        Tuple (items, total)

    Usage:
        items, total = paginate_query(query, page=1, page_size=20, order_by=User.last_name)
    """
    total = query.count()

    if order_by is not None:
        if isinstance(order_by, tuple):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return items, total


def apply_search_filter(
    query: Query,
    search_term: Optional[str],
    *fields
) -> Query:
    """
    ILIKE search over several columns.

    Usage:
        query = apply_search_filter(query, search, User.first_name, User.last_name, User.email)
    """
    if not search_term or not fields:
        return query

    conditions = [field.ilike(f"%{search_term}%") for field in fields]
    return query.filter(or_(*conditions))
