"""Account model and the role policy that derives permissions from roles."""

import enum
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace_auth.models.base import Base, TimestampMixin, UUIDMixin, new_id, utcnow


class AccountRole(enum.StrEnum):
    customer = "customer"
    vendor = "vendor"
    admin = "admin"
    superadmin = "superadmin"


class AccountStatus(enum.StrEnum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"
    pending = "pending"


class Permission(enum.StrEnum):
    manage_users = "manage_users"
    manage_products = "manage_products"
    manage_orders = "manage_orders"
    manage_settings = "manage_settings"
    promote_users = "promote_users"
    view_analytics = "view_analytics"
    manage_permissions = "manage_permissions"


ADMIN_ROLES = frozenset({AccountRole.admin, AccountRole.superadmin})


@dataclass(frozen=True)
class PermissionSet:
    manage_users: bool = False
    manage_products: bool = False
    manage_orders: bool = False
    manage_settings: bool = False
    promote_users: bool = False
    view_analytics: bool = False
    manage_permissions: bool = False

    def has(self, permission: Permission | str) -> bool:
        return bool(getattr(self, Permission(permission).value))

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)

    def with_overrides(self, overrides: dict[str, bool] | None) -> "PermissionSet":
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        return replace(self, **{k: bool(v) for k, v in overrides.items() if k in known})


ROLE_PERMISSIONS: dict[AccountRole, PermissionSet] = {
    AccountRole.customer: PermissionSet(),
    AccountRole.vendor: PermissionSet(
        manage_products=True,
        manage_orders=True,
        view_analytics=True,
    ),
    AccountRole.admin: PermissionSet(
        manage_users=True,
        manage_products=True,
        manage_orders=True,
        manage_settings=True,
        view_analytics=True,
    ),
    AccountRole.superadmin: PermissionSet(
        manage_users=True,
        manage_products=True,
        manage_orders=True,
        manage_settings=True,
        promote_users=True,
        view_analytics=True,
        manage_permissions=True,
    ),
}


def permissions_for_role(role: AccountRole | str) -> PermissionSet:
    """Return the permission set a role grants."""
    return ROLE_PERMISSIONS[AccountRole(role)]


class StoreProfile(Base):
    """Vendor store details; exists only for vendor accounts."""

    __tablename__ = "store_profiles"

    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    store_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    logo: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class AccountStatusChange(Base):
    """One entry of an account's status history."""

    __tablename__ = "account_status_changes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    actor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Account(UUIDMixin, TimestampMixin, Base):
    """A customer, vendor or administrator identity."""

    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountRole.customer.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountStatus.active.value
    )
    permission_overrides: Mapped[dict[str, bool] | None] = mapped_column(JSON, nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    store_profile: Mapped[StoreProfile | None] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        uselist=False,
    )
    status_history: Mapped[list[AccountStatusChange]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=AccountStatusChange.changed_at.desc(),
    )

    __table_args__ = (
        Index("idx_account_role", "role"),
        Index("idx_account_status", "status"),
    )

    @property
    def permissions(self) -> PermissionSet:
        """Effective permissions: the role table plus any recorded override."""
        return permissions_for_role(self.role).with_overrides(self.permission_overrides)

    @property
    def is_vendor(self) -> bool:
        return self.role == AccountRole.vendor

    @property
    def is_superadmin(self) -> bool:
        return self.role == AccountRole.superadmin

    def __repr__(self) -> str:
        return f"<Account {self.email} ({self.role})>"
