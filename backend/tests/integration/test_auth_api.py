"""Integration tests for the authentication endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest
from tests.helpers.users import BOB_PASSWORD, make_user

from tokenauth.core.config import TestingConfig
from tokenauth.factory import create_app
from tokenauth.services._shared.ports import InMemoryUserProvider


class MemoryStoreConfig(TestingConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    TOKEN_STORE_BACKEND = "memory"
    USER_SERVICE_URL = "http://users.test/api/v1"
    USE_PROXYFIX = False


@pytest.fixture()
def api_app():
    """Fresh application per test so in-memory token stores start empty."""
    return create_app(MemoryStoreConfig, user_provider=InMemoryUserProvider([make_user()]))


@pytest.fixture()
def client(api_app):
    return api_app.test_client()


def _login(client, password: str = BOB_PASSWORD):
    return client.post(
        "/api/v1/auth/login", json={"username": "Bob_Smith", "password": password}
    )


def _tokens(client) -> dict:
    resp = _login(client)
    assert resp.status_code == 200
    return resp.get_json()["data"]


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_health(client) -> None:
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "token_store": "memory", "store": "ok"}


def test_login_returns_bearer_pair(client) -> None:
    data = _tokens(client)
    assert data["type"] == "Bearer"
    assert data["access_token"] and data["refresh_token"]


def test_login_bad_password_is_problem_json(client) -> None:
    resp = _login(client, password="nope")
    assert resp.status_code == 401
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "invalid_credentials"
    assert body["status"] == 401
    assert resp.headers["X-Request-ID"] == body["request_id"]


def test_login_missing_fields_is_422(client) -> None:
    resp = client.post("/api/v1/auth/login", json={"username": "Bob_Smith"})
    assert resp.status_code == 422
    body = resp.get_json()
    assert body["code"] == "validation_error"
    assert "password" in body["details"]["errors"]


def test_silent_refresh_returns_access_only(client) -> None:
    tokens = _tokens(client)
    resp = client.post("/api/v1/auth/token", json={"refresh_token": tokens["refresh_token"]})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["access_token"]
    assert data["refresh_token"] is None


def test_silent_refresh_with_garbage_returns_nulls(client) -> None:
    resp = client.post("/api/v1/auth/token", json={"refresh_token": "garbage"})
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {
        "type": "Bearer",
        "access_token": None,
        "refresh_token": None,
    }


def test_refresh_rotates_and_rejects_reuse(client, freeze_time) -> None:
    with freeze_time() as frozen:
        tokens = _tokens(client)
        frozen.tick(timedelta(seconds=5))
        first = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        reused = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )

    assert first.status_code == 200
    assert first.get_json()["data"]["refresh_token"] != tokens["refresh_token"]
    assert reused.status_code == 401
    assert reused.get_json()["code"] == "invalid_token"


def test_logout_then_silent_refresh_is_empty(client) -> None:
    tokens = _tokens(client)
    body = {"refresh_token": tokens["refresh_token"]}

    resp = client.post("/api/v1/auth/logout", json=body)
    assert resp.get_json() == {"data": {"success": True}}

    after = client.post("/api/v1/auth/token", json=body)
    assert after.get_json()["data"]["access_token"] is None


def test_logout_with_invalid_token_reports_failure(client) -> None:
    resp = client.post("/api/v1/auth/logout", json={"refresh_token": "garbage"})
    assert resp.status_code == 200
    assert resp.get_json() == {"data": {"success": False}}


def test_validate_is_stateless(client) -> None:
    tokens = _tokens(client)

    ok = client.post("/api/v1/auth/validate", json={"refresh_token": tokens["refresh_token"]})
    assert ok.get_json() == {"data": {"valid": True}}

    wrong_kind = client.post(
        "/api/v1/auth/validate", json={"refresh_token": tokens["access_token"]}
    )
    assert wrong_kind.get_json() == {"data": {"valid": False}}


def test_info_reads_bearer_access_token(client) -> None:
    tokens = _tokens(client)
    resp = client.get("/api/v1/auth/info", headers=_bearer(tokens["access_token"]))

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {
        "username": "Bob_Smith",
        "firstname": "Bob",
        "lastname": "Smith",
        "roles": ["admin", "user"],
    }


@pytest.mark.parametrize("use_refresh", [False, True])
def test_info_rejects_missing_or_refresh_token(client, use_refresh) -> None:
    headers = {}
    if use_refresh:
        headers = _bearer(_tokens(client)["refresh_token"])
    resp = client.get("/api/v1/auth/info", headers=headers)

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "invalid_token"


def test_unknown_route_is_problem_json(client) -> None:
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "not_found"
