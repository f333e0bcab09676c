"""Service layer for registration, login, token refresh and profile updates."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from marketplace_auth.auth.refresh_store import RefreshTokenStore
from marketplace_auth.auth.security import (
    REFRESH,
    burn_password_check,
    hash_password,
    issue_tokens,
    verify_password,
    verify_token,
)
from marketplace_auth.errors import (
    AccountNotFound,
    DuplicateEmailError,
    Forbidden,
    InvalidCredentials,
    RoleMismatch,
    TokenExpired,
    TokenInvalid,
    ValidationError,
    VendorPendingApproval,
    VendorStoreInactive,
    field_errors_from_pydantic,
)
from marketplace_auth.models.account import ADMIN_ROLES, Account, AccountRole, AccountStatus
from marketplace_auth.models.audit_log import AuditLevel
from marketplace_auth.models.base import utcnow
from marketplace_auth.repositories.base import AccountStore
from marketplace_auth.schemas.account import AccountResponse
from marketplace_auth.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenPair,
)
from marketplace_auth.services import audit_service
from marketplace_auth.services.account_policy import (
    apply_status_change,
    create_account_with_plaintext,
)
from marketplace_auth.services.audit_service import AuditTrail
from marketplace_auth.services.kafka_producer import (
    ACCOUNT_REGISTERED,
    ACCOUNT_UPDATED,
    publish_account_event,
)
from marketplace_auth.utils.logging import get_logger

if TYPE_CHECKING:
    from aiokafka import AIOKafkaProducer

logger = get_logger(__name__)

# Statuses an account holder may switch between on their own.
SELF_SERVICE_STATUSES = frozenset({AccountStatus.active, AccountStatus.inactive})


def parse_registration(payload: dict[str, Any]) -> RegisterRequest:
    """Validate a raw registration payload, collecting every field error."""
    try:
        return RegisterRequest.model_validate(payload)
    except PydanticValidationError as err:
        raise ValidationError(field_errors_from_pydantic(err.errors())) from err


def role_matches(expected: AccountRole | str, actual: AccountRole | str) -> bool:
    """An ``admin`` login accepts admins and superadmins; other roles match exactly."""
    expected = AccountRole(expected)
    if expected == AccountRole.admin:
        return actual in ADMIN_ROLES
    return expected == actual


class AuthService:
    """Orchestrates the account holder facing workflows."""

    def __init__(
        self,
        accounts: AccountStore,
        audit: AuditTrail,
        *,
        refresh_store: RefreshTokenStore | None = None,
        event_producer: AIOKafkaProducer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.accounts = accounts
        self.audit = audit
        self._refresh_store = refresh_store
        self._event_producer = event_producer
        self._clock = clock or utcnow

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Create a customer or vendor account and sign it in."""
        if await self.accounts.get_by_email(data.email) is not None:
            raise DuplicateEmailError(data.email)

        account = create_account_with_plaintext(
            data.name,
            data.email,
            data.password,
            data.role,
            data.store_details,
            now=self._clock(),
        )
        # A concurrent registration can still win the unique constraint here.
        account = await self.accounts.create(account)
        logger.info("Registered %s account %s", account.role, account.id)

        await self.audit.record_best_effort(
            AuditLevel.info,
            f"New {account.role} registered: {account.email}",
            actor_id=account.id,
            action=audit_service.USER_REGISTERED,
            details={"role": account.role, "status": account.status},
        )
        await publish_account_event(
            self._event_producer,
            ACCOUNT_REGISTERED,
            {"account_id": account.id, "role": account.role, "status": account.status},
        )
        tokens = await self._issue(account)
        return AuthResponse(user=AccountResponse.model_validate(account), tokens=tokens)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Authenticate credentials and apply the role and vendor gates."""
        account = await self.accounts.get_by_email(data.email)
        if account is None:
            burn_password_check(data.password)
            logger.info("Login failed: no account for the given email")
            raise AccountNotFound()

        if data.role is not None and not role_matches(data.role, account.role):
            logger.info("Login failed: %s requested role %s", account.id, data.role)
            raise RoleMismatch(expected=data.role.value, actual=account.role)

        if not verify_password(data.password, account.hashed_password):
            await self.audit.record_best_effort(
                AuditLevel.warning,
                f"Failed login attempt for {account.email}",
                actor_id=account.id,
                action=audit_service.LOGIN_FAILED,
            )
            raise InvalidCredentials()

        if account.is_vendor:
            if account.status != AccountStatus.active:
                raise VendorPendingApproval(account.status)
            if account.store_profile is None or not account.store_profile.active:
                raise VendorStoreInactive()

        tokens = await self._issue(account)
        account.last_login_at = self._clock()
        account = await self.accounts.save(account)

        await self.audit.record_best_effort(
            AuditLevel.info,
            f"{account.role} logged in: {account.email}",
            actor_id=account.id,
            action=audit_service.LOGIN_SUCCESS,
        )
        return AuthResponse(user=AccountResponse.model_validate(account), tokens=tokens)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair."""
        try:
            claims = verify_token(refresh_token, token_type=REFRESH, now=self._clock())
        except TokenExpired as err:
            raise TokenInvalid("Refresh token has expired") from err

        account_id = claims["sub"]
        token_id = claims.get("jti")
        if self._refresh_store is not None:
            if not token_id or not await self._refresh_store.consume(
                account_id, token_id, claims.get("ver")
            ):
                raise TokenInvalid("Refresh token has been rotated or revoked")

        account = await self.accounts.get_by_id(account_id)
        if account is None:
            raise TokenInvalid("Account no longer exists")
        return await self._issue(account)

    async def _issue(self, account: Account) -> TokenPair:
        issued = issue_tokens(account.id, account.email, account.role, now=self._clock())
        return TokenPair(
            access_token=issued.access_token,
            refresh_token=issued.refresh_token,
            expires_in=issued.expires_in,
        )

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def update_profile(self, account: Account, data: ProfileUpdate) -> Account:
        """Apply a self-service update to ``account``.

        Every check runs before the first mutation, so a refused update leaves
        the account untouched.
        """
        name = data.name.strip() if data.name is not None else None
        email = data.email.strip().lower() if data.email is not None else None
        if email is not None and email != account.email:
            other = await self.accounts.get_by_email(email)
            if other is not None and other.id != account.id:
                raise DuplicateEmailError(email)

        if data.new_password:
            if not data.current_password:
                raise ValidationError.single("current_password", "Current password is required")
            if not verify_password(data.current_password, account.hashed_password):
                raise ValidationError.single("current_password", "Current password is incorrect")

        status_changing = data.status is not None and data.status != account.status
        if status_changing and account.status not in SELF_SERVICE_STATUSES:
            raise Forbidden("Account status can only be changed by an administrator")

        changed: list[str] = []
        if name is not None and name != account.name:
            account.name = name
            changed.append("name")
        if email is not None and email != account.email:
            account.email = email
            changed.append("email")
        if data.new_password:
            account.hashed_password = hash_password(data.new_password)
            changed.append("password")
        if status_changing:
            apply_status_change(
                account,
                data.status,
                reason=data.status_reason,
                actor_id=account.id,
                now=self._clock(),
            )
            changed.append("status")

        if not changed:
            return account

        account = await self.accounts.save(account)
        if "password" in changed and self._refresh_store is not None:
            await self._refresh_store.revoke(account.id, now=self._clock())

        await self.audit.record_best_effort(
            AuditLevel.info,
            f"Profile updated: {account.email}",
            actor_id=account.id,
            action=audit_service.PROFILE_UPDATED,
            details={"fields": changed},
        )
        await publish_account_event(
            self._event_producer,
            ACCOUNT_UPDATED,
            {"account_id": account.id, "fields": changed},
        )
        return account
