"""Pydantic schemas for registration, login, tokens and profile updates."""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from marketplace_auth.models.account import AccountRole
from marketplace_auth.schemas.account import AccountResponse, StoreDetails

SELF_SERVICE_ROLES = (AccountRole.customer, AccountRole.vendor)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: AccountRole = AccountRole.customer
    store_details: StoreDetails | None = Field(default=None, validate_default=True)

    @field_validator("role")
    @classmethod
    def check_self_service_role(cls, v: AccountRole) -> AccountRole:
        if v not in SELF_SERVICE_ROLES:
            raise ValueError("Role must be customer or vendor")
        return v

    @field_validator("store_details")
    @classmethod
    def check_store_details(
        cls, v: StoreDetails | None, info: ValidationInfo
    ) -> StoreDetails | None:
        role = info.data.get("role")
        if role == AccountRole.vendor and v is None:
            raise ValueError("Store details are required for vendor registration")
        if role != AccountRole.vendor:
            return None
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    role: AccountRole | None = None


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(BaseModel):
    """Returned by register and login."""

    user: AccountResponse
    tokens: TokenPair


class RefreshResponse(BaseModel):
    tokens: TokenPair


class ProfileUpdate(BaseModel):
    """Self-service profile update. Every field is optional."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    email: EmailStr | None = None
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=6, max_length=128)
    status: Literal["active", "inactive"] | None = None
    status_reason: str | None = Field(default=None, max_length=500)
