"""The ``{data, error, success, message, meta}`` response envelope.

Backend route handlers wrap their payloads in this shape by convention. The
client core never requires it; callers opt in by passing
``response_model=ApiResponse[Goal]`` and then ``unwrap()`` the payload.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from client_spine.core.errors import CallError, ErrorCategory

T = TypeVar("T")


class PageMeta(BaseModel):
    """Pagination metadata of a list response."""

    model_config = ConfigDict(populate_by_name=True)

    page: int | None = None
    limit: int | None = None
    total: int | None = None
    total_pages: int | None = Field(default=None, alias="totalPages")


class ApiResponse(BaseModel, Generic[T]):
    """Application-level response envelope."""

    data: T | None = None
    error: str | None = None
    success: bool
    message: str | None = None
    meta: PageMeta | None = None

    def unwrap(self) -> T | None:
        """Return ``data``, or raise if the envelope reports failure.

        A failed envelope can arrive with a 2xx status, so the raised error
        carries no status and kind "envelope".
        """
        if not self.success:
            raise CallError(
                self.error or self.message or "Request was not successful",
                kind="envelope",
                category=ErrorCategory.CLIENT,
                body=self.model_dump(),
            )
        return self.data


__all__ = ["ApiResponse", "PageMeta"]
