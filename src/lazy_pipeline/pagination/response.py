"""
Response payload for paginated endpoints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from lazy_pipeline.pagination.page import PaginatedPage

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """JSON body returned by list endpoints.

    Examples:
        >>> page = paginate(range(100), Pagination(0, 10))
        >>> body = Page.from_paginated("ok", page).model_dump()
        >>> body["next_cursor"], body["has_more"]
        (1, True)
    """

    message: str = Field(description="Human-readable status message")
    data: list[T] = Field(default_factory=list, description="Items of this page")
    current_cursor: int = Field(ge=0, description="Cursor of this page")
    page_size: int = Field(ge=1, description="Items per page")
    total_elements: int | None = Field(
        default=None, description="Total item count, omitted when not computed"
    )
    next_cursor: int | None = Field(
        default=None, description="Cursor of the next page, absent on the last page"
    )
    has_more: bool = Field(default=False, description="Whether a next page exists")

    @classmethod
    def from_paginated(cls, message: str, page: PaginatedPage[T]) -> Page[T]:
        """Build the payload from a paginated page.

        Args:
            message: Status message
            page: Items and summary

        Returns:
            Page payload
        """
        summary = page.summary
        return cls(
            message=message,
            data=list(page.items),
            current_cursor=summary.current_cursor,
            page_size=summary.page_size,
            total_elements=summary.total_elements,
            next_cursor=summary.next_cursor,
            has_more=summary.has_more,
        )
