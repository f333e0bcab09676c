"""Admin API endpoints: account management, the audit log and system settings."""

from fastapi import APIRouter, Depends, Query, status
from fastapi_filter import FilterDepends

from marketplace_auth.auth.dependencies import CurrentUser, require_permission, require_role
from marketplace_auth.dependencies import AdminSvc, SettingsSvc
from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.account import Permission
from marketplace_auth.schemas.account import (
    AccountAdminUpdate,
    AccountListResponse,
    AccountResponse,
    PermissionOverrideRequest,
    PromoteRequest,
)
from marketplace_auth.schemas.audit import AuditLogCreate, AuditLogResponse
from marketplace_auth.schemas.settings import SystemSettingsResponse, SystemSettingsUpdate
from marketplace_auth.utils.audit import audit_logged

router = APIRouter(dependencies=[Depends(require_role("admin", "superadmin"))])


@router.get("/users", response_model=AccountListResponse)
async def list_users(
    service: AdminSvc,
    filters: AccountFilter = FilterDepends(AccountFilter),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
) -> AccountListResponse:
    """List accounts with optional filtering and pagination."""
    accounts, total = await service.list_accounts(filters, page=page, size=size)
    return AccountListResponse.paginate(
        items=[AccountResponse.model_validate(a) for a in accounts],
        total=total,
        page=page,
        size=size,
    )


@router.get("/users/{account_id}", response_model=AccountResponse)
async def get_user(account_id: str, service: AdminSvc) -> AccountResponse:
    """Get an account by ID."""
    return AccountResponse.model_validate(await service.get_account(account_id))


@router.put(
    "/users/{account_id}",
    response_model=AccountResponse,
    dependencies=[Depends(audit_logged("update_account"))],
)
async def update_user(
    account_id: str,
    body: AccountAdminUpdate,
    current_user: CurrentUser,
    service: AdminSvc,
) -> AccountResponse:
    """Change an account's status and/or role."""
    account = await service.update_account(current_user, account_id, body)
    return AccountResponse.model_validate(account)


@router.put(
    "/promote/{account_id}",
    response_model=AccountResponse,
    dependencies=[Depends(audit_logged("promote_account"))],
)
async def promote_user(
    account_id: str,
    body: PromoteRequest,
    current_user: CurrentUser,
    service: AdminSvc,
) -> AccountResponse:
    """Promote an account to admin or superadmin."""
    account = await service.promote(current_user, account_id, body)
    return AccountResponse.model_validate(account)


@router.put(
    "/users/{account_id}/permissions",
    response_model=AccountResponse,
    dependencies=[
        Depends(require_permission(Permission.manage_permissions)),
        Depends(audit_logged("override_permissions")),
    ],
)
async def override_permissions(
    account_id: str,
    body: PermissionOverrideRequest,
    current_user: CurrentUser,
    service: AdminSvc,
) -> AccountResponse:
    """Record a permission override for an account."""
    account = await service.set_permission_overrides(current_user, account_id, body.permissions)
    return AccountResponse.model_validate(account)


@router.get("/logs", response_model=list[AuditLogResponse])
async def list_logs(
    service: AdminSvc,
    filters: AuditLogFilter = FilterDepends(AuditLogFilter),
    limit: int = Query(100, ge=1, le=1000),
) -> list[AuditLogResponse]:
    """List audit entries, newest first."""
    entries = await service.list_audit_logs(filters, limit=limit)
    return [AuditLogResponse.model_validate(e) for e in entries]


@router.post(
    "/logs",
    response_model=AuditLogResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audit_logged("create_audit_entry"))],
)
async def create_log(
    body: AuditLogCreate,
    current_user: CurrentUser,
    service: AdminSvc,
) -> AuditLogResponse:
    """Append a manual audit entry."""
    entry = await service.add_audit_entry(current_user, body)
    return AuditLogResponse.model_validate(entry)


@router.get(
    "/settings",
    response_model=SystemSettingsResponse,
    dependencies=[Depends(require_permission(Permission.manage_settings))],
)
async def get_system_settings(service: SettingsSvc) -> SystemSettingsResponse:
    """Current marketplace settings, created with defaults on first read."""
    return SystemSettingsResponse.model_validate(await service.get())


@router.put(
    "/settings",
    response_model=SystemSettingsResponse,
    dependencies=[
        Depends(require_permission(Permission.manage_settings)),
        Depends(audit_logged("update_settings")),
    ],
)
async def update_system_settings(
    body: SystemSettingsUpdate,
    current_user: CurrentUser,
    service: SettingsSvc,
) -> SystemSettingsResponse:
    """Update the marketplace settings."""
    settings = await service.update(current_user, body)
    return SystemSettingsResponse.model_validate(settings)
