from .jwt_handler import create_access_token, verify_access_token
from .api_key import verify_api_key
from .dependencies import ACCESS_TOKEN_COOKIE, SESSION_COOKIE, verify_internal_api_key
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "create_access_token",
    "verify_access_token",
    "verify_api_key",
    "verify_internal_api_key",
    "ACCESS_TOKEN_COOKIE",
    "SESSION_COOKIE",
    "limiter",
    "user_id_or_ip"
]
