"""Per-client request throttling (slowapi, in-memory storage)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per application so limits never leak between app instances."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        headers_enabled=False,
    )
