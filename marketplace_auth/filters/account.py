"""Declarative filters for Account queries."""

from __future__ import annotations

from typing import Optional

from fastapi_filter.contrib.sqlalchemy import Filter

from marketplace_auth.models.account import Account


class AccountFilter(Filter):
    """FilterSet for the admin account list.

    Supported query params::

        ?status=pending
        ?role=vendor
        ?search=acme
        ?order_by=-created_at
    """

    status: Optional[str] = None
    role: Optional[str] = None
    search: Optional[str] = None
    order_by: Optional[list[str]] = ["-created_at"]

    class Constants(Filter.Constants):
        model = Account
        search_model_fields = ["name", "email"]
