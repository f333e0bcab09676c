"""Access log line for privileged routes."""

from fastapi import Request

from marketplace_auth.auth.dependencies import CurrentUser
from marketplace_auth.utils.logging import get_logger

logger = get_logger("audit")


def audit_logged(action: str):
    """Dependency factory that logs who called a privileged route.

    Usage::

        @router.put("/users/{id}", dependencies=[Depends(audit_logged("update_account"))])

    This only writes a log line; the persisted audit entries are written by
    the services.
    """

    async def _log(request: Request, current_user: CurrentUser) -> None:
        client_ip = request.client.host if request.client else "unknown"
        request_id = getattr(request.state, "request_id", "n/a")
        logger.info(
            "ACCESS action=%s account=%s role=%s ip=%s request_id=%s path=%s",
            action,
            current_user.id,
            current_user.role,
            client_ip,
            request_id,
            request.url.path,
        )

    return _log
