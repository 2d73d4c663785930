"""Response envelope shared by every endpoint."""
from __future__ import annotations
import math
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, model_serializer

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        # message and data are left out of the body when there is nothing to send
        body = handler(self)
        return {key: value for key, value in body.items() if key == "success" or value is not None}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


class Listing(BaseModel, Generic[T]):
    items: list[T]
    total: int


def paginate(items: list, page: int, limit: int, total: int) -> dict:
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    }


def listing(items: list) -> dict:
    return {"items": items, "total": len(items)}
