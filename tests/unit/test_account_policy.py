"""Unit tests for account construction and state transitions."""

from datetime import UTC, datetime

import pytest

from marketplace_auth.auth.security import hash_password, verify_password
from marketplace_auth.errors import ValidationError
from marketplace_auth.models.account import AccountRole, AccountStatus
from marketplace_auth.services.account_policy import (
    activate_store,
    apply_status_change,
    change_role,
    create_account_with_plaintext,
    create_account_with_prehashed_credential,
    default_status_for,
)
from tests.conftest import make_account, make_store_details


class TestCreateWithPlaintext:
    def test_hashes_password(self):
        account = create_account_with_plaintext("Thandi", "thandi@shop.co.za", "secret1")
        assert account.hashed_password != "secret1"
        assert verify_password("secret1", account.hashed_password)

    def test_lowercases_email(self):
        account = create_account_with_plaintext("Thandi", "Thandi@Shop.co.za", "secret1")
        assert account.email == "thandi@shop.co.za"

    def test_customer_defaults(self):
        account = create_account_with_plaintext("Thandi", "thandi@shop.co.za", "secret1")
        assert account.id
        assert account.role == "customer"
        assert account.status == "active"
        assert account.store_profile is None
        assert account.permission_overrides is None
        assert account.last_login_at is None

    def test_vendor_starts_pending_with_inactive_store(self):
        account = create_account_with_plaintext(
            "Acme Pharmacy", "acme@x.com", "secret1", "vendor", make_store_details()
        )
        assert account.status == "pending"
        assert account.store_profile.store_name == "Acme"
        assert account.store_profile.active is False
        assert account.store_profile.account_id == account.id

    def test_vendor_requires_store(self):
        with pytest.raises(ValidationError) as exc_info:
            create_account_with_plaintext("Acme", "acme@x.com", "secret1", "vendor")
        assert exc_info.value.errors[0].field == "store_details"

    def test_non_vendor_ignores_store(self):
        account = create_account_with_plaintext(
            "Thandi", "thandi@shop.co.za", "secret1", "customer", make_store_details()
        )
        assert account.store_profile is None

    def test_records_initial_status(self):
        now = datetime(2026, 1, 1, tzinfo=UTC)
        account = create_account_with_plaintext(
            "Thandi", "thandi@shop.co.za", "secret1", now=now
        )
        assert len(account.status_history) == 1
        assert account.status_history[0].status == "active"
        assert account.status_history[0].changed_at == now
        assert account.created_at == now

    def test_explicit_status(self):
        account = create_account_with_plaintext(
            "Root", "root@shop.co.za", "secret1", "superadmin", status="active"
        )
        assert account.status == "active"

    def test_empty_password_rejected(self):
        with pytest.raises(ValidationError):
            create_account_with_plaintext("Thandi", "thandi@shop.co.za", "")


class TestCreateWithPrehashed:
    def test_keeps_credential(self):
        credential = hash_password("secret1")
        account = create_account_with_prehashed_credential(
            "Thandi", "thandi@shop.co.za", credential
        )
        assert account.hashed_password == credential

    def test_rejects_plaintext(self):
        with pytest.raises(ValidationError):
            create_account_with_prehashed_credential("Thandi", "thandi@shop.co.za", "secret1")


class TestApplyStatusChange:
    def test_prepends_exactly_one_entry(self):
        account = make_account(AccountRole.vendor)
        before = len(account.status_history)
        entry = apply_status_change(account, "active", reason="Approved", actor_id="admin-1")
        assert account.status == "active"
        assert len(account.status_history) == before + 1
        assert account.status_history[0] is entry
        assert entry.reason == "Approved"
        assert entry.actor_id == "admin-1"
        assert entry.account_id == account.id

    def test_history_is_newest_first(self):
        account = make_account(AccountRole.customer)
        apply_status_change(account, "inactive")
        apply_status_change(account, "suspended")
        assert [h.status for h in account.status_history] == ["suspended", "inactive", "active"]

    def test_rejects_unknown_status(self):
        account = make_account(AccountRole.customer)
        with pytest.raises(ValueError):
            apply_status_change(account, "banned")


class TestChangeRole:
    def test_promote_to_admin_yields_admin_table(self):
        account = make_account(AccountRole.customer)
        assert change_role(account, AccountRole.admin) is True
        assert account.permissions.as_dict() == {
            "manage_users": True,
            "manage_products": True,
            "manage_orders": True,
            "manage_settings": True,
            "promote_users": False,
            "view_analytics": True,
            "manage_permissions": False,
        }

    def test_same_role_is_noop(self):
        account = make_account(AccountRole.admin)
        assert change_role(account, "admin") is False

    def test_clears_overrides(self):
        account = make_account(AccountRole.customer)
        account.permission_overrides = {"view_analytics": True}
        change_role(account, AccountRole.admin)
        assert account.permission_overrides is None

    def test_becoming_vendor_needs_store(self):
        account = make_account(AccountRole.customer)
        with pytest.raises(ValidationError):
            change_role(account, AccountRole.vendor)
        assert account.role == "customer"

    def test_leaving_vendor_drops_store(self):
        account = make_account(AccountRole.vendor)
        change_role(account, AccountRole.customer)
        assert account.store_profile is None


class TestActivateStore:
    def test_activates_once(self):
        account = make_account(AccountRole.vendor)
        assert activate_store(account) is True
        assert account.store_profile.active is True
        assert activate_store(account) is False

    def test_no_store(self):
        assert activate_store(make_account(AccountRole.customer)) is False


def test_default_status_for():
    assert default_status_for("vendor") == AccountStatus.pending
    for role in ("customer", "admin", "superadmin"):
        assert default_status_for(role) == AccountStatus.active
