"""API v1 router: aggregates all sub-routers."""

from typing import Any

from fastapi import APIRouter

from marketplace_auth.api.v1 import admin, auth
from marketplace_auth.schemas.common import ErrorResponse


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` entries documenting the shared error body."""
    return {code: {"model": ErrorResponse} for code in status_codes}


api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Auth"],
    responses=error_responses(400, 401, 403, 409),
)
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
    responses=error_responses(400, 401, 403, 404, 409),
)
