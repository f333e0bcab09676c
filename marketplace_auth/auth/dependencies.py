"""Authorization dependencies: bearer token to account, role and permission gates."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from marketplace_auth.auth.security import ACCESS, verify_token
from marketplace_auth.dependencies import AccountRepo
from marketplace_auth.errors import Forbidden, Unauthenticated
from marketplace_auth.models.account import Account, AccountRole, Permission
from marketplace_auth.utils.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    repo: AccountRepo,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Account:
    """Resolve the bearer token to the stored account.

    Role and status are read from storage, never trusted from the claims, so a
    change made after the token was issued applies on the next request.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing bearer token")

    claims = verify_token(credentials.credentials, token_type=ACCESS)
    account = await repo.get_by_id(claims["sub"])
    if account is None:
        raise Unauthenticated("Account no longer exists")

    request.state.identity = {"id": account.id, "email": account.email, "role": account.role}
    return account


CurrentUser = Annotated[Account, Depends(get_current_user)]


def require_role(*roles: AccountRole | str):
    """Dependency factory: the caller's current role must be one of ``roles``."""
    allowed = [AccountRole(r).value for r in roles]

    async def _check(current_user: CurrentUser) -> Account:
        if current_user.role not in allowed:
            logger.info("Role %s denied, requires one of %s", current_user.role, allowed)
            raise Forbidden("Insufficient role", required_roles=allowed)
        return current_user

    return _check


def require_permission(permission: Permission | str):
    """Dependency factory: the caller needs ``permission``. Superadmins always pass."""
    permission = Permission(permission)

    async def _check(current_user: CurrentUser) -> Account:
        if current_user.is_superadmin or current_user.permissions.has(permission):
            return current_user
        logger.info("Permission %s denied for %s", permission, current_user.id)
        raise Forbidden("Insufficient permissions", missing_permission=permission.value)

    return _check
