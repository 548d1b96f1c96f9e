"""Response envelope and pagination helpers shared by all routers"""

import math
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Query

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def success_response(
    data: Any = None, message: Optional[str] = None, pagination: Optional[dict] = None, **extra
) -> dict:
    """Build the standard success envelope"""
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    if pagination:
        body["pagination"] = pagination
    body.update(extra)
    return body


@dataclass
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def info(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit) if total else 0,
        }


def parse_pagination(page: Optional[int], limit: Optional[int]) -> Pagination:
    """Clamp page to >= 1 and limit to 1..100"""
    page = max(1, page or 1)
    if limit is None:
        limit = DEFAULT_PAGE_SIZE
    limit = min(MAX_PAGE_SIZE, max(1, limit))
    return Pagination(page=page, limit=limit)


def pagination_params(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
) -> Pagination:
    """FastAPI dependency for ?page=&limit="""
    return parse_pagination(page, limit)


def paginate(query, pagination: Pagination) -> tuple[list, int]:
    """Apply offset/limit to a SQLAlchemy query, returning (items, total)"""
    total = query.order_by(None).count()
    items = query.offset(pagination.offset).limit(pagination.limit).all()
    return items, total
