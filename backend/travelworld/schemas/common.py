"""Shared pydantic building blocks: camelCase models, envelopes, pagination."""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class RequestModel(BaseModel):
    """Base for request bodies: camelCase or snake_case keys, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class ResponseModel(BaseModel):
    """Base for response payloads: built from ORM objects, serialized as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[DataT]):
    """``{"success": true, "message": ..., "data": ...}`` wrapper for every response."""

    success: bool = True
    message: str = "Successful"
    data: DataT


class Pagination(ResponseModel):
    current_page: int
    total_pages: int
    total: int
    limit: int
    has_next: bool
    has_prev: bool


class ListEnvelope(BaseModel, Generic[DataT]):
    """Envelope for paginated collections."""

    success: bool = True
    message: str = "Successful"
    count: int
    data: list[DataT]
    pagination: Pagination


class MessageResponse(BaseModel):
    """Envelope without a payload."""

    success: bool = True
    message: str


@dataclass(frozen=True)
class PageParams:
    """1-indexed page request: ``skip = (page - 1) * limit``."""

    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total: int) -> Pagination:
        total_pages = math.ceil(total / self.limit) if self.limit else 0
        return Pagination(
            current_page=self.page,
            total_pages=total_pages,
            total=total,
            limit=self.limit,
            has_next=self.page * self.limit < total,
            has_prev=self.page > 1,
        )
