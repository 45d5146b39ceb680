"""Shared fixtures: an app on in-memory SQLite, seeded users, fake Cloudinary."""

from __future__ import annotations

from typing import Any, Callable

import cloudinary.uploader
import pytest

from api import create_app
from models import storage
from models.user import User
from utils.security import hash_password
from utils.sessions import EXTENSION_KEY, SessionManager

API = "/api/v1"
PASSWORD = "Secret123!"


@pytest.fixture
def config_overrides(tmp_path) -> dict[str, Any]:
    return {"UPLOAD_TMP_DIR": str(tmp_path / "uploads")}


@pytest.fixture
def app(config_overrides):
    app = create_app("testing", config_overrides)
    yield app
    storage.dispose()


@pytest.fixture
def client(app):
    # Cookies are passed explicitly so each test controls what the server sees
    return app.test_client(use_cookies=False)


@pytest.fixture
def session_manager(app) -> SessionManager:
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def make_user(app) -> Callable[..., User]:
    def _make(
        username: str = "alice",
        email: str = "alice@x.com",
        password: str = PASSWORD,
        full_name: str = "Alice Example",
        avatar: str = "https://res.cloudinary.com/demo/image/upload/v1/alice-avatar.png",
    ) -> User:
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            avatar=avatar,
            cover_image="",
            password_hash=hash_password(password),
        )
        storage.new(user)
        storage.save()
        return user

    return _make


@pytest.fixture
def alice(make_user) -> User:
    return make_user()


@pytest.fixture
def login(client) -> Callable[..., dict[str, Any]]:
    def _login(username: str = "alice", password: str = PASSWORD) -> dict[str, Any]:
        response = client.post(f"{API}/users/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.get_json()
        return response.get_json()["data"]

    return _login


@pytest.fixture
def auth_headers(login) -> dict[str, str]:
    return {"Authorization": f"Bearer {login()['accessToken']}"}


@pytest.fixture
def fake_cloudinary(monkeypatch) -> dict[str, list]:
    """Replace Cloudinary network calls; records uploads and destroys."""
    calls: dict[str, list] = {"upload": [], "destroy": []}

    def fake_upload(path, **kwargs):
        calls["upload"].append(path)
        public_id = f"asset{len(calls['upload'])}"
        return {
            "public_id": public_id,
            "url": f"https://res.cloudinary.com/demo/image/upload/v1/{public_id}.png",
        }

    def fake_destroy(public_id, **kwargs):
        calls["destroy"].append(public_id)
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    return calls
