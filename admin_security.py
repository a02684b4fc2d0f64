import hmac
from fastapi import Request
from config import settings
from errors import AuthenticationError

ADMIN_KEY_HEADER = "X-Admin-Key"


def _candidate_keys():
    base = []
    if settings.ADMIN_API_KEY:
        base.append(settings.ADMIN_API_KEY)
    if settings.ADMIN_API_ADDITIONAL_KEYS:
        base.extend([s.strip() for s in settings.ADMIN_API_ADDITIONAL_KEYS.split(',') if s.strip()])
    return base


def verify_admin_key(provided: str | None):
    candidates = _candidate_keys()
    if not candidates:
        # No key configured: only acceptable for local development
        if settings.DEBUG:
            return
        raise AuthenticationError("Admin access is not configured")
    if not provided:
        raise AuthenticationError("Missing admin key")
    # Accept any current or additional (rotated) key
    for candidate in candidates:
        if hmac.compare_digest(candidate.encode(), provided.encode()):
            return
    raise AuthenticationError("Invalid admin key")


async def require_admin(request: Request) -> str:
    """Route dependency for /api/admin/*; returns the actor name used in audit entries."""
    verify_admin_key(request.headers.get(ADMIN_KEY_HEADER))
    return "admin"
