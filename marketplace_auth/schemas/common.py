"""Schemas shared across the API: pagination and error bodies."""

from math import ceil

from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """Base paginated response; subclasses declare ``items``."""

    total: int
    page: int
    size: int
    pages: int

    @classmethod
    def paginate(cls, *, items: list, total: int, page: int, size: int, **kwargs):
        """Build a paginated response with automatic page count."""
        return cls(
            items=items,
            total=total,
            page=page,
            size=size,
            pages=ceil(total / size) if size > 0 else 0,
            **kwargs,
        )


class MessageResponse(BaseModel):
    message: str


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response produced by the exception handlers."""

    detail: str
    code: str
    errors: list[FieldErrorResponse] | None = None
    needs_refresh: bool | None = None
    status: str | None = None
    missing_permission: str | None = None
    required_roles: list[str] | None = None
