"""Account construction and state transitions.

Everything here works on in-memory ``Account`` objects and never touches
storage. Workflows build or mutate accounts with these helpers and hand the
result to a repository.
"""

from datetime import datetime

from marketplace_auth.auth.security import hash_password, is_hashed
from marketplace_auth.errors import FieldError, ValidationError
from marketplace_auth.models.account import (
    Account,
    AccountRole,
    AccountStatus,
    AccountStatusChange,
    StoreProfile,
)
from marketplace_auth.models.base import new_id, utcnow
from marketplace_auth.schemas.account import StoreDetails

_STORE_FIELDS = ("store_name", "description", "address", "phone")


def default_status_for(role: AccountRole | str) -> AccountStatus:
    """Vendors start pending approval, everybody else starts active."""
    return AccountStatus.pending if AccountRole(role) == AccountRole.vendor else AccountStatus.active


def _check_store(role: AccountRole, store_details: StoreDetails | None) -> None:
    if role != AccountRole.vendor:
        return
    if store_details is None:
        raise ValidationError.single("store_details", "Store details are required for vendors")
    errors = [
        FieldError(f"store_details.{name}", "Field is required")
        for name in _STORE_FIELDS
        if not (getattr(store_details, name) or "").strip()
    ]
    if errors:
        raise ValidationError(errors)


def _build_account(
    name: str,
    email: str,
    credential: str,
    role: AccountRole | str,
    store_details: StoreDetails | None,
    status: AccountStatus | str | None,
    now: datetime | None,
) -> Account:
    role = AccountRole(role)
    _check_store(role, store_details)
    now = now or utcnow()
    account_id = new_id()

    store_profile = None
    if role == AccountRole.vendor:
        store_profile = StoreProfile(
            account_id=account_id,
            store_name=store_details.store_name.strip(),
            description=store_details.description.strip(),
            address=store_details.address.strip(),
            phone=store_details.phone.strip(),
            logo=store_details.logo or "",
            active=False,
        )

    account = Account(
        id=account_id,
        name=name.strip(),
        email=email.strip().lower(),
        hashed_password=credential,
        role=role.value,
        permission_overrides=None,
        last_login_at=None,
        created_at=now,
        updated_at=now,
        store_profile=store_profile,
        status_history=[],
    )
    apply_status_change(
        account,
        AccountStatus(status) if status else default_status_for(role),
        reason="Account created",
        now=now,
    )
    return account


def create_account_with_plaintext(
    name: str,
    email: str,
    password: str,
    role: AccountRole | str = AccountRole.customer,
    store_details: StoreDetails | None = None,
    *,
    status: AccountStatus | str | None = None,
    now: datetime | None = None,
) -> Account:
    """Build a new account, hashing ``password``."""
    if not password:
        raise ValidationError.single("password", "Password is required")
    return _build_account(
        name, email, hash_password(password), role, store_details, status, now
    )


def create_account_with_prehashed_credential(
    name: str,
    email: str,
    credential: str,
    role: AccountRole | str = AccountRole.customer,
    store_details: StoreDetails | None = None,
    *,
    status: AccountStatus | str | None = None,
    now: datetime | None = None,
) -> Account:
    """Build a new account from a credential that is already a bcrypt hash."""
    if not is_hashed(credential):
        raise ValidationError.single("password", "Credential is not a bcrypt hash")
    return _build_account(name, email, credential, role, store_details, status, now)


def apply_status_change(
    account: Account,
    new_status: AccountStatus | str,
    *,
    reason: str | None = None,
    actor_id: str | None = None,
    now: datetime | None = None,
) -> AccountStatusChange:
    """Set the account status and prepend exactly one history entry."""
    now = now or utcnow()
    new_status = AccountStatus(new_status)
    entry = AccountStatusChange(
        id=new_id(),
        account_id=account.id,
        status=new_status.value,
        reason=reason,
        actor_id=actor_id,
        changed_at=now,
    )
    account.status = new_status.value
    account.status_history.insert(0, entry)
    account.updated_at = now
    return entry


def activate_store(account: Account) -> bool:
    """Mark a vendor's store active. Returns True if it changed."""
    if account.store_profile is None or account.store_profile.active:
        return False
    account.store_profile.active = True
    return True


def change_role(account: Account, new_role: AccountRole | str) -> bool:
    """Move an account to ``new_role``. Returns True if the role changed.

    Permissions follow from the role, so any recorded override is dropped.
    Becoming a vendor needs an existing store profile; leaving the vendor
    role drops it.
    """
    new_role = AccountRole(new_role)
    if account.role == new_role:
        return False
    if new_role == AccountRole.vendor and account.store_profile is None:
        raise ValidationError.single("role", "A store profile is required for vendor accounts")
    if account.role == AccountRole.vendor and new_role != AccountRole.vendor:
        account.store_profile = None
    account.role = new_role.value
    account.permission_overrides = None
    account.updated_at = utcnow()
    return True
