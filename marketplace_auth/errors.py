"""Domain error taxonomy.

Workflows raise these; ``main.py`` maps them to HTTP responses. Each error
carries the status code, a stable machine-readable ``code`` and the message
that is safe to show to end users.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class AuthError(Exception):
    """Base class for every failure the service reports to callers."""

    status_code: int = 500
    code: str = "error"
    public_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.public_message, "code": self.code}


class ValidationError(AuthError):
    status_code = 400
    code = "validation_error"
    public_message = "Validation failed"

    def __init__(self, errors: Sequence[FieldError], message: str | None = None) -> None:
        self.errors = list(errors)
        super().__init__(message or "; ".join(f"{e.field}: {e.message}" for e in self.errors))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)], message=message)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = [{"field": e.field, "message": e.message} for e in self.errors]
        return payload


class DuplicateEmailError(AuthError):
    status_code = 409
    code = "duplicate_email"
    public_message = "Email already exists"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Account with email {email} already exists")


class AccountNotFound(AuthError):
    status_code = 400
    code = "invalid_credentials"
    public_message = "Invalid email or password"


class InvalidCredentials(AuthError):
    status_code = 400
    code = "invalid_credentials"
    public_message = "Invalid email or password"


class RoleMismatch(AuthError):
    status_code = 403
    code = "role_mismatch"
    public_message = "Access denied for the requested role"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Role mismatch: requested {expected}, account is {actual}")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["detail"] = f"Invalid credentials for {self.expected} login"
        return payload


class VendorPendingApproval(AuthError):
    status_code = 403
    code = "vendor_pending_approval"
    public_message = "Your vendor account is pending approval"

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Vendor account status is {status}")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status
        return payload


class VendorStoreInactive(AuthError):
    status_code = 403
    code = "store_inactive"
    public_message = "Your store is not yet activated"

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = "store_inactive"
        return payload


class Unauthenticated(AuthError):
    status_code = 401
    code = "unauthenticated"
    public_message = "Not authenticated"
    needs_refresh = False

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["needs_refresh"] = self.needs_refresh
        return payload


class TokenExpired(Unauthenticated):
    code = "token_expired"
    public_message = "Token has expired"
    needs_refresh = True


class TokenInvalid(Unauthenticated):
    code = "token_invalid"
    public_message = "Token is not valid"


class Forbidden(AuthError):
    status_code = 403
    code = "forbidden"
    public_message = "Access denied"

    def __init__(
        self,
        message: str | None = None,
        *,
        missing_permission: str | None = None,
        required_roles: Iterable[str] | None = None,
    ) -> None:
        self.missing_permission = missing_permission
        self.required_roles = list(required_roles) if required_roles else None
        super().__init__(message)
        self.public_message = message or self.public_message

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.missing_permission:
            payload["missing_permission"] = self.missing_permission
        if self.required_roles:
            payload["required_roles"] = self.required_roles
        return payload


class NotFound(AuthError):
    status_code = 404
    code = "not_found"
    public_message = "Account not found"


class HashingError(AuthError):
    status_code = 500
    code = "hashing_failed"
    public_message = "Could not process credentials"


class StorageUnavailableError(RuntimeError):
    """Raised at startup when the database never became reachable."""


def field_errors_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[FieldError]:
    """Flatten pydantic error dicts into field errors.

    The leading ``body`` segment FastAPI adds to request locations is dropped.
    """
    result = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        result.append(FieldError(".".join(loc) or "__root__", err.get("msg", "Invalid value")))
    return result
