"""Page/limit query parameters shared by every list endpoint"""

import math

from fastapi import Query
from sqlalchemy.orm import Query as SAQuery


class PageParams:
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Items per page"),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total else 0


def paginate(query: SAQuery, params: PageParams) -> tuple[list, int]:
    """Run a query for one page; returns (items, total matching rows)"""
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return items, total
