from typing import Type
from fastapi import Query
from pydantic import BaseModel
from app.core.config import settings
from app.schemas import PaginatedResponse, PaginationMetadata, SortOrder


class PageParams:
    """Shared ``page``/``per_page``/``order`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-indexed)"),
        per_page: int = Query(
            settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Number of items per page"
        ),
        order: SortOrder = Query(SortOrder.desc, description="Sort by creation time"),
    ):
        self.page = page
        self.per_page = per_page
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def descending(self) -> bool:
        return self.order == SortOrder.desc

    def wrap(self, total: int, items: list, schema: Type[BaseModel]) -> PaginatedResponse:
        return PaginatedResponse[schema](
            items=[schema.model_validate(item) for item in items],
            pagination=PaginationMetadata.build(total, self.page, self.per_page),
        )
