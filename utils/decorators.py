from __future__ import annotations
from functools import wraps
from typing import Optional

from flask import request, g

from utils.exceptions import UnauthorizedError
from utils.sessions import get_session_manager


def _access_token_from_request() -> Optional[str]:
    """Cookie first (browser clients), then `Authorization: Bearer` (API clients)."""
    token = request.cookies.get("accessToken")
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _access_token_from_request()
            if not token:
                raise UnauthorizedError("Unauthorized request")
            # InvalidTokenError / ExpiredTokenError propagate to the 401 handler
            g.current_user = get_session_manager().authenticate(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
