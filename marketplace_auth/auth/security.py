"""JWT token and password hashing utilities."""

import re
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
from jose import JWTError, jwt

from marketplace_auth.config import get_settings
from marketplace_auth.errors import HashingError, TokenExpired, TokenInvalid

# bcrypt only looks at the first 72 bytes of input.
_BCRYPT_MAX_BYTES = 72
_BCRYPT_HASH = re.compile(r"^\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}$")

ACCESS = "access"
REFRESH = "refresh"


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def is_hashed(value: str | None) -> bool:
    """True if ``value`` is already a bcrypt credential."""
    return bool(value) and _BCRYPT_HASH.match(value) is not None


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password with bcrypt and a fresh salt."""
    rounds = get_settings().bcrypt_rounds
    try:
        return bcrypt.hashpw(_encode(plain_password), bcrypt.gensalt(rounds=rounds)).decode()
    except (ValueError, TypeError, OSError) as err:
        raise HashingError(f"bcrypt failed: {err}") from err


def ensure_hashed(value: str) -> str:
    """Hash ``value`` unless it is already a bcrypt credential."""
    return value if is_hashed(value) else hash_password(value)


def verify_password(plain_password: str | None, hashed_password: str | None) -> bool:
    """Verify a plain-text password against a bcrypt hash. Never raises."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode())
    except (ValueError, TypeError):
        return False


@lru_cache
def _dummy_hash() -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds)).decode()


def burn_password_check(plain_password: str | None) -> None:
    """Spend the same bcrypt work as a real check when there is no account."""
    verify_password(plain_password or "x", _dummy_hash())


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    refresh_token_id: str
    expires_in: int


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def create_access_token(
    account_id: str, email: str, role: str, *, now: datetime | None = None
) -> str:
    """Create a short-lived JWT access token."""
    settings = get_settings()
    issued = _now(now)
    expire = issued + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "email": email,
        "role": role,
        "type": ACCESS,
        "iat": int(issued.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def issue_stamp(moment: datetime) -> int:
    """Microsecond issue stamp carried as the refresh token's ``ver`` claim."""
    return int(moment.timestamp() * 1_000_000)


def create_refresh_token(account_id: str, *, now: datetime | None = None) -> tuple[str, str]:
    """Create a long-lived JWT refresh token. Returns ``(token, token_id)``."""
    settings = get_settings()
    issued = _now(now)
    expire = issued + timedelta(days=settings.jwt_refresh_token_expire_days)
    token_id = uuid.uuid4().hex
    payload = {
        "sub": account_id,
        "type": REFRESH,
        "ver": issue_stamp(issued),
        "jti": token_id,
        "iat": int(issued.timestamp()),
        "exp": int(expire.timestamp()),
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, token_id


def issue_tokens(
    account_id: str, email: str, role: str, *, now: datetime | None = None
) -> IssuedTokens:
    """Issue an access/refresh pair for an account."""
    issued = _now(now)
    refresh_token, token_id = create_refresh_token(account_id, now=issued)
    return IssuedTokens(
        access_token=create_access_token(account_id, email, role, now=issued),
        refresh_token=refresh_token,
        refresh_token_id=token_id,
        expires_in=get_settings().access_token_ttl_seconds,
    )


def verify_token(
    token: str, *, token_type: str = ACCESS, now: datetime | None = None
) -> dict[str, Any]:
    """Check signature, type and expiry; return the claims.

    Raises TokenExpired for a well-signed token past its expiry and
    TokenInvalid for everything else.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False},
        )
    except JWTError as err:
        raise TokenInvalid(f"Token rejected: {err}") from err

    if claims.get("type") != token_type:
        raise TokenInvalid("Invalid token type")
    if not claims.get("sub"):
        raise TokenInvalid("Invalid token: missing subject")

    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        raise TokenInvalid("Invalid token: missing expiry")
    if _now(now).timestamp() >= exp:
        raise TokenExpired()
    return claims
