"""Unit tests for the HTTP user service client, mocked with ``responses``."""

from __future__ import annotations

import pytest
import requests
import responses

from tokenauth.infra.http.user_service_client import HttpUserServiceClient
from tokenauth.services._shared.errors import UserServiceError

BASE = "http://users.test/api/v1"
BOB_URL = f"{BASE}/users/username/Bob_Smith"

BOB_JSON = {
    "id": 1,
    "username": "Bob_Smith",
    "password": "$2b$04$abcdefghijklmnopqrstuu3Iu9iN1oT2/uJ7m3tzhPq6zC8bUFz4K",
    "firstname": "Bob",
    "lastname": "Smith",
    "email": "bob_smith@mail.com",
    "status": "ACTIVE",
    "roles": [{"id": 1, "name": "user"}, {"id": 2, "name": "admin"}],
}


@pytest.fixture()
def client() -> HttpUserServiceClient:
    return HttpUserServiceClient(base_url=BASE + "/", timeout=1.0)


@responses.activate
def test_found_user_is_mapped(client):
    # Arrange
    responses.add(responses.GET, BOB_URL, json=BOB_JSON, status=200)

    # Act
    user = client.find_by_username("Bob_Smith")

    # Assert
    assert user is not None
    assert user.id == 1
    assert user.password_hash == BOB_JSON["password"]
    assert user.roles == frozenset({"user", "admin"})
    assert user.is_active


@responses.activate
def test_plain_string_roles_are_accepted(client):
    responses.add(responses.GET, BOB_URL, json={**BOB_JSON, "roles": ["user"]}, status=200)
    assert client.find_by_username("Bob_Smith").roles == frozenset({"user"})


@responses.activate
def test_404_means_unknown_user(client):
    responses.add(responses.GET, BOB_URL, json={"error": "not found"}, status=404)
    assert client.find_by_username("Bob_Smith") is None


@responses.activate
def test_server_error_raises(client):
    responses.add(responses.GET, BOB_URL, status=503)
    with pytest.raises(UserServiceError) as exc:
        client.find_by_username("Bob_Smith")
    assert exc.value.status_code == 503
    assert len(responses.calls) == 1  # no retry


@responses.activate
def test_malformed_body_raises(client):
    responses.add(responses.GET, BOB_URL, json={"id": 1}, status=200)
    with pytest.raises(UserServiceError):
        client.find_by_username("Bob_Smith")


@responses.activate
def test_transport_errors_propagate(client):
    responses.add(responses.GET, BOB_URL, body=requests.ConnectionError("down"))
    with pytest.raises(requests.ConnectionError):
        client.find_by_username("Bob_Smith")


@responses.activate
def test_username_is_url_quoted(client):
    responses.add(responses.GET, f"{BASE}/users/username/a%2Fb", status=404)
    assert client.find_by_username("a/b") is None
