"""Service layer for privileged account management and the audit log views."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from marketplace_auth.auth.refresh_store import RefreshTokenStore
from marketplace_auth.errors import Forbidden, NotFound, ValidationError
from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.account import (
    ADMIN_ROLES,
    Account,
    AccountRole,
    AccountStatus,
    Permission,
    permissions_for_role,
)
from marketplace_auth.models.audit_log import AuditLevel, AuditLog
from marketplace_auth.repositories.base import AccountStore
from marketplace_auth.schemas.account import AccountAdminUpdate, PromoteRequest
from marketplace_auth.schemas.audit import AuditLogCreate
from marketplace_auth.services import audit_service
from marketplace_auth.services.account_policy import (
    activate_store,
    apply_status_change,
    change_role,
)
from marketplace_auth.services.audit_service import AuditTrail
from marketplace_auth.services.kafka_producer import (
    ACCOUNT_DELETED,
    ACCOUNT_UPDATED,
    publish_account_event,
)
from marketplace_auth.utils.logging import get_logger

if TYPE_CHECKING:
    from aiokafka import AIOKafkaProducer

logger = get_logger(__name__)

SUPERADMIN_ONLY = [AccountRole.superadmin.value]


class AccountAdminService:
    """Administrative mutations of other accounts.

    Every mutation is audited through ``AuditTrail.record``; a failed audit
    write propagates and the request's transaction is rolled back with it.
    """

    def __init__(
        self,
        accounts: AccountStore,
        audit: AuditTrail,
        *,
        refresh_store: RefreshTokenStore | None = None,
        event_producer: AIOKafkaProducer | None = None,
    ) -> None:
        self.accounts = accounts
        self.audit = audit
        self._refresh_store = refresh_store
        self._event_producer = event_producer

    async def get_account(self, account_id: str) -> Account:
        account = await self.accounts.get_by_id(account_id)
        if account is None:
            raise NotFound()
        return account

    async def list_accounts(
        self, filters: AccountFilter, page: int = 1, size: int = 50
    ) -> tuple[list[Account], int]:
        return await self.accounts.get_all(filters, page=page, size=size)

    async def update_account(
        self, actor: Account, target_id: str, data: AccountAdminUpdate
    ) -> Account:
        """Change another account's status and/or role."""
        target = await self.get_account(target_id)

        if target.is_superadmin and not actor.is_superadmin:
            raise Forbidden(
                "Only a superadmin can modify a superadmin account",
                required_roles=SUPERADMIN_ONLY,
            )
        if data.role == AccountRole.superadmin and not actor.is_superadmin:
            raise Forbidden(
                "Only a superadmin can grant the superadmin role",
                required_roles=SUPERADMIN_ONLY,
            )

        changes: dict[str, Any] = {}

        if data.role is not None:
            previous_role = target.role
            if change_role(target, data.role):
                changes["role"] = {"from": previous_role, "to": target.role}

        if data.status is not None:
            if data.status != target.status:
                previous_status = target.status
                apply_status_change(target, data.status, reason=data.reason, actor_id=actor.id)
                changes["status"] = {"from": previous_status, "to": target.status}
            # Activating a vendor activates its store as well.
            if data.status == AccountStatus.active and target.is_vendor and activate_store(target):
                changes["store_active"] = True

        if not changes:
            return target

        target = await self.accounts.save(target)
        await self.audit.record(
            AuditLevel.info,
            f"Account {target.email} updated by {actor.email}",
            actor_id=actor.id,
            action=audit_service.ACCOUNT_UPDATED,
            details={"target_id": target.id, "changes": changes, "reason": data.reason},
        )
        await publish_account_event(
            self._event_producer,
            ACCOUNT_UPDATED,
            {"account_id": target.id, "changes": changes, "actor_id": actor.id},
        )
        return target

    async def promote(self, actor: Account, target_id: str, data: PromoteRequest) -> Account:
        """Promote an account to admin or superadmin."""
        if data.role not in ADMIN_ROLES:
            raise ValidationError.single("role", "Role must be admin or superadmin")
        return await self.update_account(
            actor, target_id, AccountAdminUpdate(role=data.role, reason=data.reason)
        )

    async def set_permission_overrides(
        self, actor: Account, target_id: str, permissions: dict[Permission, bool]
    ) -> Account:
        """Record deviations from the role table for one account.

        Only entries that differ from the role's defaults are stored; an empty
        result clears the override.
        """
        if not actor.is_superadmin:
            raise Forbidden(
                "Only a superadmin can override permissions",
                missing_permission=Permission.manage_permissions.value,
            )
        target = await self.get_account(target_id)
        if target.is_superadmin:
            raise Forbidden("Superadmin permissions cannot be overridden")

        defaults = permissions_for_role(target.role)
        overrides = {
            Permission(name).value: bool(value)
            for name, value in permissions.items()
            if defaults.has(name) != bool(value)
        }
        previous = target.permission_overrides
        target.permission_overrides = overrides or None
        target = await self.accounts.save(target)

        await self.audit.record(
            AuditLevel.info,
            f"Permissions of {target.email} overridden by {actor.email}",
            actor_id=actor.id,
            action=audit_service.PERMISSIONS_OVERRIDE,
            details={"target_id": target.id, "from": previous, "to": target.permission_overrides},
        )
        return target

    async def delete_account(self, actor: Account, target_id: str) -> None:
        """Hard-delete an account. Superadmin only; superadmins cannot be deleted."""
        if not actor.is_superadmin:
            raise Forbidden("Only a superadmin can delete accounts", required_roles=SUPERADMIN_ONLY)
        target = await self.get_account(target_id)
        if target.is_superadmin:
            raise Forbidden("Superadmin accounts cannot be deleted")

        await self.audit.record(
            AuditLevel.warning,
            f"Account {target.email} deleted by {actor.email}",
            actor_id=actor.id,
            action=audit_service.ACCOUNT_DELETED,
            details={"target_id": target.id, "email": target.email, "role": target.role},
        )
        await self.accounts.delete(target)
        logger.info("Account %s deleted by %s", target.id, actor.id)

        if self._refresh_store is not None:
            await self._refresh_store.revoke(target.id)
        await publish_account_event(
            self._event_producer,
            ACCOUNT_DELETED,
            {"account_id": target.id, "actor_id": actor.id},
        )

    async def list_audit_logs(self, filters: AuditLogFilter, limit: int = 100) -> list[AuditLog]:
        return await self.audit.repo.get_all(filters, limit=limit)

    async def add_audit_entry(self, actor: Account, data: AuditLogCreate) -> AuditLog:
        """Append a manual audit entry on behalf of ``actor``."""
        return await self.audit.record(
            data.level,
            data.message,
            actor_id=actor.id,
            action=data.action or audit_service.MANUAL_ENTRY,
            details=data.details,
        )
