"""Unit tests for the admin role-management workflow."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from marketplace_auth.auth.refresh_store import RefreshTokenStore
from marketplace_auth.auth.security import issue_stamp
from marketplace_auth.errors import Forbidden, NotFound, ValidationError
from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.account import AccountRole, Permission
from marketplace_auth.models.base import utcnow
from marketplace_auth.schemas.account import AccountAdminUpdate, PromoteRequest
from marketplace_auth.schemas.audit import AuditLogCreate
from marketplace_auth.services.admin_service import AccountAdminService
from marketplace_auth.services.audit_service import AuditTrail
from tests.conftest import make_account


@pytest.fixture()
def service(account_repo, audit_repo):
    return AccountAdminService(account_repo, AuditTrail(audit_repo))


@pytest.mark.asyncio
class TestUpdateAccount:
    async def test_missing_target(self, service, admin):
        with pytest.raises(NotFound):
            await service.update_account(admin, "nope", AccountAdminUpdate(status="active"))

    async def test_admin_cannot_touch_superadmin(self, service, admin, superadmin):
        with pytest.raises(Forbidden):
            await service.update_account(
                admin, superadmin.id, AccountAdminUpdate(role=AccountRole.admin)
            )
        assert superadmin.role == "superadmin"

    async def test_admin_cannot_grant_superadmin(self, service, admin, customer):
        with pytest.raises(Forbidden) as exc_info:
            await service.update_account(
                admin, customer.id, AccountAdminUpdate(role=AccountRole.superadmin)
            )
        assert exc_info.value.required_roles == ["superadmin"]

    async def test_superadmin_can_grant_superadmin(self, service, superadmin, customer):
        updated = await service.update_account(
            superadmin, customer.id, AccountAdminUpdate(role=AccountRole.superadmin)
        )
        assert updated.role == "superadmin"

    async def test_activating_vendor_activates_store(self, service, admin, pending_vendor):
        updated = await service.update_account(
            admin, pending_vendor.id, AccountAdminUpdate(status="active", reason="Approved")
        )
        assert updated.status == "active"
        assert updated.store_profile.active is True
        entry = updated.status_history[0]
        assert entry.status == "active"
        assert entry.actor_id == admin.id
        assert entry.reason == "Approved"

    async def test_reactivation_fixes_inactive_store(self, service, admin, account_repo):
        vendor = await account_repo.create(make_account(AccountRole.vendor, status="active"))
        history = len(vendor.status_history)
        await service.update_account(admin, vendor.id, AccountAdminUpdate(status="active"))
        assert vendor.store_profile.active is True
        assert len(vendor.status_history) == history

    async def test_suspension_leaves_store_alone(self, service, admin, pending_vendor):
        await service.update_account(admin, pending_vendor.id, AccountAdminUpdate(status="suspended"))
        assert pending_vendor.status == "suspended"
        assert pending_vendor.store_profile.active is False

    async def test_audit_entry_has_delta(self, service, audit_repo, admin, pending_vendor):
        await service.update_account(admin, pending_vendor.id, AccountAdminUpdate(status="active"))
        entry = audit_repo.entries[-1]
        assert entry.level == "info"
        assert entry.action == "ACCOUNT_UPDATED"
        assert entry.actor_id == admin.id
        assert entry.details["target_id"] == pending_vendor.id
        assert entry.details["changes"]["status"] == {"from": "pending", "to": "active"}
        assert entry.details["changes"]["store_active"] is True

    async def test_audit_failure_propagates(self, account_repo, admin, customer):
        failing = AsyncMock()
        failing.append.side_effect = RuntimeError("audit store down")
        service = AccountAdminService(account_repo, AuditTrail(failing))
        with pytest.raises(RuntimeError):
            await service.update_account(admin, customer.id, AccountAdminUpdate(status="suspended"))

    async def test_no_change_is_not_audited(self, service, audit_repo, admin, customer):
        await service.update_account(admin, customer.id, AccountAdminUpdate(status="active"))
        assert audit_repo.entries == []

    async def test_role_change_to_vendor_needs_store(self, service, admin, customer):
        with pytest.raises(ValidationError):
            await service.update_account(
                admin, customer.id, AccountAdminUpdate(role=AccountRole.vendor)
            )


@pytest.mark.asyncio
class TestPromote:
    async def test_to_admin_yields_admin_table(self, service, admin, customer):
        updated = await service.promote(admin, customer.id, PromoteRequest(role="admin"))
        perms = updated.permissions
        assert perms.manage_users
        assert perms.manage_products
        assert perms.manage_orders
        assert perms.manage_settings
        assert perms.view_analytics
        assert perms.promote_users is False
        assert perms.manage_permissions is False

    async def test_only_admin_roles(self, service, admin, customer):
        with pytest.raises(ValidationError):
            await service.promote(admin, customer.id, PromoteRequest(role="vendor"))

    async def test_admin_cannot_promote_to_superadmin(self, service, admin, customer):
        with pytest.raises(Forbidden):
            await service.promote(admin, customer.id, PromoteRequest(role="superadmin"))


@pytest.mark.asyncio
class TestDeleteAccount:
    @pytest.mark.parametrize("actor_role", ["customer", "vendor", "admin", "superadmin"])
    async def test_superadmin_target_always_forbidden(
        self, service, account_repo, superadmin, actor_role
    ):
        actor = await account_repo.create(
            make_account(actor_role, email=f"actor-{actor_role}@shop.co.za")
        )
        with pytest.raises(Forbidden):
            await service.delete_account(actor, superadmin.id)
        assert await account_repo.get_by_id(superadmin.id) is superadmin

    async def test_admin_cannot_delete(self, service, admin, customer):
        with pytest.raises(Forbidden):
            await service.delete_account(admin, customer.id)

    async def test_missing_target(self, service, superadmin):
        with pytest.raises(NotFound):
            await service.delete_account(superadmin, "nope")

    async def test_deletes_and_audits(self, service, account_repo, audit_repo, superadmin, customer):
        await service.delete_account(superadmin, customer.id)
        assert await account_repo.get_by_id(customer.id) is None
        entry = audit_repo.entries[-1]
        assert entry.level == "warning"
        assert entry.action == "ACCOUNT_DELETED"
        assert entry.details["email"] == customer.email

    async def test_audit_failure_aborts(self, account_repo, superadmin, customer):
        failing = AsyncMock()
        failing.append.side_effect = RuntimeError("audit store down")
        service = AccountAdminService(account_repo, AuditTrail(failing))
        with pytest.raises(RuntimeError):
            await service.delete_account(superadmin, customer.id)
        assert await account_repo.get_by_id(customer.id) is customer

    async def test_revokes_refresh_tokens(
        self, account_repo, audit_repo, redis_client, superadmin, customer
    ):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        issued = issue_stamp(utcnow() - timedelta(minutes=5))
        service = AccountAdminService(account_repo, AuditTrail(audit_repo), refresh_store=store)
        await service.delete_account(superadmin, customer.id)
        assert await store.consume(customer.id, "token-1", issued) is False


@pytest.mark.asyncio
class TestPermissionOverrides:
    async def test_superadmin_records_deviation_only(self, service, superadmin, customer):
        updated = await service.set_permission_overrides(
            superadmin,
            customer.id,
            {Permission.view_analytics: True, Permission.manage_users: False},
        )
        assert updated.permission_overrides == {"view_analytics": True}
        assert updated.permissions.view_analytics is True

    async def test_matching_defaults_clear_override(self, service, superadmin, customer):
        customer.permission_overrides = {"view_analytics": True}
        updated = await service.set_permission_overrides(
            superadmin, customer.id, {Permission.view_analytics: False}
        )
        assert updated.permission_overrides is None

    async def test_admin_cannot_override(self, service, admin, customer):
        with pytest.raises(Forbidden) as exc_info:
            await service.set_permission_overrides(
                admin, customer.id, {Permission.view_analytics: True}
            )
        assert exc_info.value.missing_permission == "manage_permissions"

    async def test_audited(self, service, audit_repo, superadmin, customer):
        await service.set_permission_overrides(
            superadmin, customer.id, {Permission.view_analytics: True}
        )
        assert audit_repo.entries[-1].action == "PERMISSIONS_OVERRIDE"


@pytest.mark.asyncio
class TestReadViews:
    async def test_list_accounts_filters(self, service, customer, admin, pending_vendor):
        items, total = await service.list_accounts(AccountFilter(role="vendor"))
        assert total == 1
        assert items[0].id == pending_vendor.id

    async def test_list_accounts_search(self, service, customer, admin):
        items, total = await service.list_accounts(AccountFilter(search="ADMIN@"))
        assert [a.id for a in items] == [admin.id]

    async def test_get_account(self, service, customer):
        assert (await service.get_account(customer.id)) is customer

    async def test_manual_audit_entry_and_listing(self, service, admin):
        await service.add_audit_entry(admin, AuditLogCreate(level="warning", message="Manual check"))
        await service.add_audit_entry(admin, AuditLogCreate(message="Second", action="NOTE"))
        entries = await service.list_audit_logs(AuditLogFilter())
        assert [e.message for e in entries] == ["Second", "Manual check"]
        warnings = await service.list_audit_logs(AuditLogFilter(level="warning"))
        assert [e.action for e in warnings] == ["MANUAL_ENTRY"]
