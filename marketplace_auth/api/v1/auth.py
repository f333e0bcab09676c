"""Authentication API endpoints: registration, login, tokens and profile."""

from fastapi import APIRouter, Depends, Request, status

from marketplace_auth.auth.dependencies import CurrentUser
from marketplace_auth.dependencies import AdminSvc, AuthSvc
from marketplace_auth.schemas.account import AccountResponse
from marketplace_auth.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
)
from marketplace_auth.schemas.common import MessageResponse
from marketplace_auth.utils.audit import audit_logged
from marketplace_auth.utils.rate_limit import auth_limit, limiter

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    service: AuthSvc,
) -> AuthResponse:
    """Register a customer or vendor account and return tokens."""
    return await service.register(body)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(auth_limit)
async def login(
    request: Request,
    body: LoginRequest,
    service: AuthSvc,
) -> AuthResponse:
    """Authenticate with email and password, optionally for a specific role."""
    return await service.login(body)


@router.post("/refresh-token", response_model=RefreshResponse)
@limiter.limit(auth_limit)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    service: AuthSvc,
) -> RefreshResponse:
    """Exchange a refresh token for a new token pair."""
    return RefreshResponse(tokens=await service.refresh(body.refresh_token))


@router.get("/profile", response_model=AccountResponse)
async def get_profile(current_user: CurrentUser) -> AccountResponse:
    """Return the authenticated account."""
    return AccountResponse.model_validate(current_user)


@router.put("/profile", response_model=AccountResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: CurrentUser,
    service: AuthSvc,
) -> AccountResponse:
    """Update the authenticated account's own profile."""
    account = await service.update_profile(current_user, body)
    return AccountResponse.model_validate(account)


@router.delete(
    "/users/{account_id}",
    response_model=MessageResponse,
    dependencies=[Depends(audit_logged("delete_account"))],
)
async def delete_user(
    account_id: str,
    current_user: CurrentUser,
    service: AdminSvc,
) -> MessageResponse:
    """Delete an account. Superadmin only; superadmins cannot be deleted."""
    await service.delete_account(current_user, account_id)
    return MessageResponse(message="Account deleted")
