from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from hiring_compass.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.global_rate_limit] if settings.rate_limit_enabled else [],
    enabled=settings.rate_limit_enabled,
)


def rate_limit(limit: str):
    if settings.rate_limit_enabled:
        return limiter.limit(limit)

    def decorator(func):
        return func

    return decorator
