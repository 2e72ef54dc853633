from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from donorhub.domain.models import Page

T = TypeVar("T")


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )


class PaginationResponse(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool

    @staticmethod
    def from_domain(page: Page) -> "PaginationResponse":
        return PaginationResponse(
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            has_more=page.has_more,
        )


class DataResponse(CamelModel, Generic[T]):
    data: T
    message: Optional[str] = None


class ListResponse(CamelModel, Generic[T]):
    data: List[T]
    pagination: PaginationResponse


class MessageResponse(CamelModel):
    message: str
