"""Shared model base and pagination types."""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base model for persisted and API shapes.

    Attributes are snake_case in Python and camelCase on the wire and in
    MongoDB documents.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_document(self) -> dict:
        """Dump using camelCase aliases for MongoDB or JSON."""
        return self.model_dump(by_alias=True)


class Pagination(CamelModel):
    """1-based page number and page size."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=100)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResult(CamelModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, data: List[T], total: int, pagination: Pagination) -> "PaginatedResult[T]":
        return cls(
            data=data,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=math.ceil(total / pagination.page_size),
        )
