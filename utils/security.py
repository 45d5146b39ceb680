"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT issuance/verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from utils.exceptions import ExpiredTokenError, InvalidTokenError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenSettings:
    """Signing key, lifetime and type tag for one kind of token."""

    secret: str
    expires: timedelta
    token_type: str = ACCESS
    algorithm: str = "HS256"
    issuer: str = "videotube-api"


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def issue_token(
    user_id: str,
    settings: TokenSettings,
    now: Optional[datetime] = None,
    claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Mint a signed token for user_id. `now` is the issuance time; callers only
    pass it to backdate tokens.
    """
    issued_at = now or _now()
    payload = dict(claims or {})
    payload.update(
        {
            "iss": settings.issuer,
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + settings.expires).timestamp()),
            "type": settings.token_type,
            "jti": generate_jti(),
        }
    )
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def decode_token(token: str, settings: TokenSettings) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises ExpiredTokenError past `exp`,
    InvalidTokenError on a bad signature, malformed token or wrong type.
    """
    try:
        decoded = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError(f"{settings.token_type.capitalize()} token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(f"Invalid {settings.token_type} token") from exc

    if decoded.get("type") != settings.token_type:
        raise InvalidTokenError("Wrong token type")
    return decoded


def verify_token(token: str, settings: TokenSettings) -> str:
    """Return the user id embedded in a valid token."""
    return decode_token(token, settings)["sub"]
