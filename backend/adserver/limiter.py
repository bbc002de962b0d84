"""
Shared Rate Limiter Instance

Imported by the public routers and registered on the app in main.py.
Limits apply per client address to the unauthenticated ad-serving routes.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED
)
