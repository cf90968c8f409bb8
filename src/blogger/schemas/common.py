"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Pagination(APIModel):
    """Page metadata returned alongside list results."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Pagination:
        """Derive page metadata from a page number, page size and total count."""
        pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=pages,
            total_items=total,
            has_next=page < pages,
            has_prev=page > 1,
        )


class Message(APIModel):
    """Plain acknowledgement body."""

    message: str
