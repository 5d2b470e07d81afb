from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.settings import settings

# Counters live in process memory unless RATE_LIMIT_STORAGE_URI points at Redis.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    storage_uri=settings.rate_limit_storage_uri,
)


def login_limit() -> str:
    """Per-client cap for credential checks, tighter than the default limit."""
    return f"{settings.login_rate_limit_per_minute}/minute"


__all__ = ["limiter", "login_limit"]
