"""
Credential store: the persistence seam used by the session manager.

The session manager only needs to find users by identity, read them by id,
and overwrite two columns (refresh_token, password_hash). Keeping that behind
an interface lets the manager be built with any store; SQLCredentialStore is
the one backed by DBStorage.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import or_

from models.db_storage import DBStorage
from models.user import User


class CredentialStore(ABC):

    @abstractmethod
    def find_by_identity(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        """Return the user matching username OR email, if any."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def set_refresh_token(self, user_id: str, token: Optional[str]) -> None:
        """Overwrite (or clear, with None) the stored refresh token."""

    @abstractmethod
    def swap_refresh_token(self, user_id: str, expected: str, token: str) -> bool:
        """Replace the stored refresh token only if it still equals `expected`.

        Returns False when another writer got there first.
        """

    @abstractmethod
    def set_password_hash(self, user_id: str, password_hash: str) -> None:
        ...


class SQLCredentialStore(CredentialStore):
    def __init__(self, storage: DBStorage):
        self._storage = storage

    def find_by_identity(self, username=None, email=None):
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None
        session = self._storage.get_session()
        return session.query(User).filter(or_(*clauses)).first()

    def get(self, user_id):
        return self._storage.get(User, user_id)

    def set_refresh_token(self, user_id, token):
        # Single-row UPDATE: concurrent writers serialize here, last one wins
        session = self._storage.get_session()
        session.query(User).filter(User.id == user_id).update(
            {User.refresh_token: token}, synchronize_session="fetch"
        )
        self._storage.save()

    def swap_refresh_token(self, user_id, expected, token):
        # Compare-and-set in one UPDATE; rowcount 0 means the token was already rotated
        session = self._storage.get_session()
        matched = session.query(User).filter(User.id == user_id, User.refresh_token == expected).update(
            {User.refresh_token: token}, synchronize_session="fetch"
        )
        self._storage.save()
        return matched == 1

    def set_password_hash(self, user_id, password_hash):
        session = self._storage.get_session()
        session.query(User).filter(User.id == user_id).update(
            {User.password_hash: password_hash}, synchronize_session="fetch"
        )
        self._storage.save()
