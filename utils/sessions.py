"""
Session manager: login, refresh (rotation + reuse detection), logout and
password change on top of a CredentialStore and the token helpers.

Every flow runs store read -> verification -> token issuance -> store write,
in that order. The refresh token stored on the user row is the only one
accepted. Login overwrites it, refresh swaps it only if it is still the
presented value, logout clears it.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from flask import current_app

from models.credential_store import CredentialStore
from models.user import User
from utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenReuseError,
    UnauthorizedError,
)
from utils.security import (
    ACCESS,
    REFRESH,
    TokenSettings,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "session_manager"


class SessionManager:
    def __init__(
        self,
        store: CredentialStore,
        access: TokenSettings,
        refresh: TokenSettings,
        revoke_on_password_change: bool = False,
    ):
        self.store = store
        self.access_settings = access
        self.refresh_settings = refresh
        self.revoke_on_password_change = revoke_on_password_change

    # Token issuer

    def issue_access_token(self, user: User) -> str:
        return issue_token(
            user.id,
            self.access_settings,
            claims={"username": user.username, "email": user.email},
        )

    def issue_refresh_token(self, user_id: str) -> str:
        return issue_token(user_id, self.refresh_settings)

    def issue_session(self, user: User) -> Dict[str, str]:
        """Issue an access/refresh pair and make the new refresh token the stored one."""
        access_token = self.issue_access_token(user)
        refresh_token = self.issue_refresh_token(user.id)
        self.store.set_refresh_token(user.id, refresh_token)
        return {"access_token": access_token, "refresh_token": refresh_token}

    # Flows

    def login(self, password: str, username: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        user = self.store.find_by_identity(username=username, email=email)
        if user is None:
            raise NotFoundError("User does not exist")
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Password is incorrect")

        tokens = self.issue_session(user)
        logger.info("User %s logged in", user.id)
        return {"user": user, **tokens}

    def refresh(self, presented: Optional[str]) -> Dict[str, str]:
        if not presented:
            raise UnauthorizedError("Unauthorized request")

        user_id = verify_token(presented, self.refresh_settings)
        user = self.store.get(user_id)
        if user is None:
            raise InvalidTokenError("Invalid refresh token")
        if presented != user.refresh_token:
            self._reject_reuse(user.id)

        access_token = self.issue_access_token(user)
        refresh_token = self.issue_refresh_token(user.id)
        # A concurrent refresh with the same token may have rotated it since the read
        if not self.store.swap_refresh_token(user.id, presented, refresh_token):
            self._reject_reuse(user.id)
        return {"access_token": access_token, "refresh_token": refresh_token}

    def _reject_reuse(self, user_id: str) -> None:
        logger.warning("Rejected superseded refresh token for user %s", user_id)
        raise TokenReuseError("Refresh token is expired or used")

    def logout(self, user_id: str) -> None:
        self.store.set_refresh_token(user_id, None)
        logger.info("User %s logged out", user_id)

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self.store.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(old_password, user.password_hash):
            raise InvalidCredentialsError("Old password incorrect", status_code=400)

        self.store.set_password_hash(user.id, hash_password(new_password))
        if self.revoke_on_password_change:
            self.store.set_refresh_token(user.id, None)

    def authenticate(self, access_token: str) -> User:
        """Resolve a bearer/cookie access token to its user."""
        user_id = verify_token(access_token, self.access_settings)
        user = self.store.get(user_id)
        if user is None:
            raise InvalidTokenError("Invalid access token")
        return user


def build_session_manager(config, store: CredentialStore) -> SessionManager:
    algorithm = config.get("JWT_ALGORITHM", "HS256")
    return SessionManager(
        store,
        access=TokenSettings(
            secret=config["ACCESS_TOKEN_SECRET"],
            expires=timedelta(seconds=config["ACCESS_TOKEN_EXPIRY_SECONDS"]),
            token_type=ACCESS,
            algorithm=algorithm,
        ),
        refresh=TokenSettings(
            secret=config["REFRESH_TOKEN_SECRET"],
            expires=timedelta(seconds=config["REFRESH_TOKEN_EXPIRY_SECONDS"]),
            token_type=REFRESH,
            algorithm=algorithm,
        ),
        revoke_on_password_change=config.get("REVOKE_SESSIONS_ON_PASSWORD_CHANGE", False),
    )


def get_session_manager() -> SessionManager:
    return current_app.extensions[EXTENSION_KEY]
