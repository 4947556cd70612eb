from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from shared.config.settings import RATE_LIMIT_ENABLED
from .dependencies import ACCESS_TOKEN_COOKIE, SESSION_COOKIE
from .jwt_handler import verify_access_token

def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Extracts the user ID from the access-token cookie (or Authorization header),
    then from the session cookie. Falls back to the client's IP address if unauthenticated.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    auth_header = request.headers.get("Authorization")
    if not token and auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ")[1]

    if token:
        payload = verify_access_token(token)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        return f"user:{session_id}"

    # Fallback to IP address (handles proxies if X-Forwarded-For is set correctly by Uvicorn)
    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=user_id_or_ip, enabled=RATE_LIMIT_ENABLED)
