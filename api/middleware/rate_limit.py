"""
Rate limiting middleware using slowapi.

Requests are keyed by client IP. A global default applies to every route
through SlowAPIMiddleware; write-heavy endpoints carry tighter per-route
limits via ``@limiter.limit(get_rate_limit(...))``.

Rate Limits:
- Comment / reply creation: 20 per minute
- Comment reports: 10 per minute
- Article publishing: 10 per minute
- Default: configured by RATE_LIMIT_DEFAULT (100 per minute)
"""

import ipaddress
import logging
import re

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

_IP_LIKE = re.compile(r"^[\d.:a-fA-F]+$")


def _is_public_ip(value: str) -> bool:
    """True for a syntactically valid, non-private, non-loopback address.

    Private addresses in forwarding headers can be spoofed to share a bucket
    with the proxy, so only public ones are trusted.
    """
    if not _IP_LIKE.match(value):
        return False
    try:
        addr = ipaddress.ip_address(value)
    except ValueError:
        return False
    return not (addr.is_private or addr.is_loopback or addr.is_link_local)


def get_client_ip(request: Request) -> str:
    """Client IP from X-Forwarded-For / X-Real-IP, falling back to the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",")[0].strip()
        if _is_public_ip(candidate):
            return candidate
    real_ip = request.headers.get("x-real-ip")
    if real_ip and _is_public_ip(real_ip.strip()):
        return real_ip.strip()
    return get_remote_address(request)


# Format: "count/period" where period can be: second, minute, hour, day
RATE_LIMITS = {
    "comment": "20/minute",
    "report": "10/minute",
    "publish": "10/minute",
    "default": settings.rate_limit_default,
}

_storage_uri = settings.redis_url if settings.redis_url else "memory://"

if not settings.redis_url and settings.is_production:
    logger.warning(
        "Rate limiter using in-memory storage; limits are per process. Set REDIS_URL."
    )

limiter = Limiter(
    key_func=get_client_ip,
    storage_uri=_storage_uri,
    default_limits=[RATE_LIMITS["default"]],
)


def get_rate_limit(endpoint: str) -> str:
    """
    Get rate limit configuration for a specific endpoint.

    Example:
        >>> get_rate_limit("comment")
        "20/minute"
        >>> get_rate_limit("unknown")
        "100/minute"
    """
    return RATE_LIMITS.get(endpoint, RATE_LIMITS["default"])
