"""Pydantic schemas for accounts: public view and admin requests."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from marketplace_auth.models.account import AccountRole, AccountStatus, Permission
from marketplace_auth.schemas.common import PaginatedResponse


class StoreDetails(BaseModel):
    """Vendor store profile supplied at registration."""

    model_config = ConfigDict(str_strip_whitespace=True)

    store_name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    address: str = Field(min_length=1, max_length=500)
    phone: str = Field(min_length=1, max_length=50)
    logo: str = Field(default="", max_length=500)


class StoreProfileResponse(BaseModel):
    store_name: str
    description: str
    address: str
    phone: str
    logo: str
    active: bool

    model_config = {"from_attributes": True}


class StatusChangeResponse(BaseModel):
    status: str
    reason: str | None
    actor_id: str | None
    changed_at: datetime

    model_config = {"from_attributes": True}


class PermissionsResponse(BaseModel):
    manage_users: bool
    manage_products: bool
    manage_orders: bool
    manage_settings: bool
    promote_users: bool
    view_analytics: bool
    manage_permissions: bool

    model_config = {"from_attributes": True}


class AccountResponse(BaseModel):
    """Public view of an account. Never includes the password credential."""

    id: str
    name: str
    email: str
    role: str
    status: str
    permissions: PermissionsResponse
    permission_overrides: dict[str, bool] | None = None
    store_profile: StoreProfileResponse | None = None
    status_history: list[StatusChangeResponse] = Field(default_factory=list)
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountListResponse(PaginatedResponse):
    """Paginated list of accounts."""

    items: list[AccountResponse]


class AccountAdminUpdate(BaseModel):
    """Request schema for an administrator changing another account."""

    status: AccountStatus | None = None
    role: AccountRole | None = None
    reason: str | None = Field(default=None, max_length=500)


class PromoteRequest(BaseModel):
    role: AccountRole
    reason: str | None = Field(default=None, max_length=500)


class PermissionOverrideRequest(BaseModel):
    """Superadmin override of individual permissions; empty clears overrides."""

    permissions: dict[Permission, bool]
