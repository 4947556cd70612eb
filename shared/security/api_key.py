"""
Internal API key guarding service-to-service endpoints (e.g. POST /notifications).

A missing INTERNAL_API_KEY does not stop the app from booting; a warning is
emitted and a throwaway key is generated, so the internal endpoints stay
unreachable until the key is configured.
"""
import os
import secrets
import warnings

from shared.config import settings  # noqa: F401  loads .env before the key is read

_INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

if not _INTERNAL_API_KEY:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Internal endpoints will reject every request "
        "until it is configured.",
        stacklevel=2,
    )
    _INTERNAL_API_KEY = secrets.token_urlsafe(32)

INTERNAL_API_KEY: str = _INTERNAL_API_KEY


def verify_api_key(provided_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(INTERNAL_API_KEY))
