"""HTTP contract for login / refresh-token / logout / change-password."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from models import storage
from models.user import User
from utils.security import issue_token, verify_token

API = "/api/v1"
PASSWORD = "Secret123!"


def _set_cookies(response) -> dict[str, str]:
    cookies = {}
    for header in response.headers.getlist("Set-Cookie"):
        cookies[header.split("=", 1)[0]] = header
    return cookies


def test_login_sets_cookies_and_returns_user(client, alice, session_manager) -> None:
    response = client.post(f"{API}/users/login", json={"username": "alice", "password": PASSWORD})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["email"] == "alice@x.com"
    assert "password_hash" not in data["user"]
    assert "refresh_token" not in data["user"] and "refreshToken" not in data["user"]
    assert verify_token(data["accessToken"], session_manager.access_settings) == alice.id

    cookies = _set_cookies(response)
    assert set(cookies) == {"accessToken", "refreshToken"}
    for header in cookies.values():
        assert "HttpOnly" in header
        assert "Secure" in header
    assert cookies["refreshToken"].startswith(f"refreshToken={data['refreshToken']}")


def test_login_by_email_is_case_insensitive(client, alice) -> None:
    response = client.post(f"{API}/users/login", json={"email": "Alice@X.com", "password": PASSWORD})

    assert response.status_code == 200
    assert response.get_json()["data"]["user"]["id"] == alice.id


def test_login_wrong_password_is_404(client, alice) -> None:
    response = client.post(f"{API}/users/login", json={"username": "alice", "password": "wrong"})

    assert response.status_code == 404
    body = response.get_json()
    assert body["error"] == "INVALID_CREDENTIALS"
    assert body["status"] == 404
    assert "Set-Cookie" not in response.headers


def test_login_unknown_user_is_404(client, alice) -> None:
    response = client.post(f"{API}/users/login", json={"username": "bob", "password": PASSWORD})

    assert response.status_code == 404
    assert response.get_json()["error"] == "NOT_FOUND"


def test_login_missing_identity_is_400(client) -> None:
    response = client.post(f"{API}/users/login", json={"password": PASSWORD})

    assert response.status_code == 400
    assert response.get_json()["message"] == "Username or email is required"


def test_login_missing_password_is_400(client, alice) -> None:
    response = client.post(f"{API}/users/login", json={"username": "alice"})

    assert response.status_code == 400


def test_refresh_with_body_rotates_once(client, alice, login) -> None:
    issued = login()

    first = client.post(f"{API}/users/refresh-token", json={"refreshToken": issued["refreshToken"]})
    assert first.status_code == 200
    rotated = first.get_json()["data"]
    assert rotated["refreshToken"] != issued["refreshToken"]
    assert set(_set_cookies(first)) == {"accessToken", "refreshToken"}

    again = client.post(f"{API}/users/refresh-token", json={"refreshToken": issued["refreshToken"]})
    assert again.status_code == 401
    assert again.get_json()["error"] == "TOKEN_REUSED"


def test_refresh_reads_cookie(client, alice, login) -> None:
    issued = login()

    response = client.post(
        f"{API}/users/refresh-token",
        headers={"Cookie": f"refreshToken={issued['refreshToken']}"},
    )

    assert response.status_code == 200
    assert response.get_json()["data"]["refreshToken"] != issued["refreshToken"]


def test_refresh_without_token_is_401(client) -> None:
    response = client.post(f"{API}/users/refresh-token")

    assert response.status_code == 401
    assert response.get_json()["error"] == "UNAUTHORIZED"


def test_refresh_with_garbage_is_401(client) -> None:
    response = client.post(f"{API}/users/refresh-token", json={"refreshToken": "garbage"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "INVALID_TOKEN"


def test_refresh_with_expired_token_is_401_and_keeps_stored_value(client, alice, session_manager) -> None:
    expired = issue_token(
        alice.id,
        session_manager.refresh_settings,
        now=datetime.now(timezone.utc) - timedelta(days=30),
    )
    session_manager.store.set_refresh_token(alice.id, expired)

    response = client.post(f"{API}/users/refresh-token", json={"refreshToken": expired})

    assert response.status_code == 401
    assert response.get_json()["error"] == "TOKEN_EXPIRED"
    storage.close()
    assert storage.get(User, alice.id).refresh_token == expired


def test_logout_clears_cookies_and_revokes_refresh(client, alice, login) -> None:
    issued = login()
    headers = {"Authorization": f"Bearer {issued['accessToken']}"}

    response = client.post(f"{API}/users/logout", headers=headers)
    assert response.status_code == 200
    cookies = _set_cookies(response)
    assert set(cookies) == {"accessToken", "refreshToken"}
    for header in cookies.values():
        assert "Expires=Thu, 01 Jan 1970" in header

    refresh = client.post(f"{API}/users/refresh-token", json={"refreshToken": issued["refreshToken"]})
    assert refresh.status_code == 401

    # Access tokens are stateless: logging out again still authenticates and is a no-op
    assert client.post(f"{API}/users/logout", headers=headers).status_code == 200


def test_logout_accepts_access_cookie(client, alice, login) -> None:
    issued = login()

    response = client.post(f"{API}/users/logout", headers={"Cookie": f"accessToken={issued['accessToken']}"})

    assert response.status_code == 200


def test_logout_requires_authentication(client) -> None:
    response = client.post(f"{API}/users/logout")

    assert response.status_code == 401
    assert response.get_json()["error"] == "UNAUTHORIZED"


def test_logout_rejects_refresh_token_as_bearer(client, alice, login) -> None:
    issued = login()

    response = client.post(f"{API}/users/logout", headers={"Authorization": f"Bearer {issued['refreshToken']}"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "INVALID_TOKEN"


def test_change_password_flow(client, alice, auth_headers) -> None:
    response = client.post(
        f"{API}/users/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "N3wPassword!"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["data"] == {}

    old = client.post(f"{API}/users/login", json={"username": "alice", "password": PASSWORD})
    new = client.post(f"{API}/users/login", json={"username": "alice", "password": "N3wPassword!"})
    assert old.status_code == 404
    assert new.status_code == 200


def test_change_password_wrong_old_password_is_400(client, alice, auth_headers) -> None:
    response = client.post(
        f"{API}/users/change-password",
        json={"oldPassword": "wrong", "newPassword": "N3wPassword!"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "INVALID_CREDENTIALS"


def test_change_password_requires_both_fields(client, alice, auth_headers) -> None:
    response = client.post(f"{API}/users/change-password", json={"oldPassword": PASSWORD}, headers=auth_headers)

    assert response.status_code == 400
    assert "newPassword" in response.get_json()["details"]
