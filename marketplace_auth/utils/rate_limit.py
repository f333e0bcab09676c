"""Shared slowapi limiter.

Installed on ``app.state.limiter`` by the application factory; credential
endpoints add the stricter ``auth_limit`` on top of the default limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from marketplace_auth.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.rate_limit_default],
    enabled=_settings.rate_limit_enabled,
)

auth_limit = _settings.rate_limit_auth
