"""Contract tests for the SQLAlchemy token repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from tests.factories.token import AccessTokenFactory, RefreshTokenFactory

from tokenauth.models.token import AccessToken, RefreshToken
from tokenauth.repositories.token import AccessTokenRepository, RefreshTokenRepository
from tokenauth.services._shared.errors import ConflictError, NotFoundError, violates
from tokenauth.services._shared.ports import TokenRecord

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _record(user_id: int = 1, token: str = "t1") -> TokenRecord:
    return TokenRecord(user_id, token, NOW, NOW + timedelta(minutes=5))


@pytest.fixture()
def access_repo(session) -> AccessTokenRepository:
    return AccessTokenRepository(session=session)


@pytest.fixture()
def refresh_repo(session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session=session)


def test_save_then_find_returns_utc_record(access_repo):
    access_repo.save(_record())

    found = access_repo.find_by_user_id(1)
    assert found == _record()
    assert found.issued_at.tzinfo is not None


def test_find_missing_returns_none(access_repo):
    assert access_repo.find_by_user_id(404) is None


def test_save_twice_conflicts(access_repo, session):
    access_repo.save(_record())
    with pytest.raises(ConflictError) as exc:
        access_repo.save(_record(token="t2"))
    assert exc.value.entity == "AccessToken"
    assert session.query(AccessToken).filter_by(user_id=1).count() == 1


def test_update_replaces_row_in_place(access_repo, session):
    row = AccessTokenFactory(user_id=7)
    session.flush()

    access_repo.update(7, _record(user_id=7, token="rotated"))

    assert access_repo.find_by_user_id(7).token == "rotated"
    assert session.get(AccessToken, row.id).token == "rotated"


def test_update_missing_raises_not_found(refresh_repo):
    with pytest.raises(NotFoundError) as exc:
        refresh_repo.update(1, _record())
    assert exc.value.entity == "RefreshToken"


def test_delete_removes_row_and_is_idempotent(refresh_repo, session):
    RefreshTokenFactory(user_id=3)
    session.flush()

    refresh_repo.delete(3)
    refresh_repo.delete(3)

    assert refresh_repo.find_by_user_id(3) is None
    assert session.query(RefreshToken).count() == 0


def test_tables_are_independent(access_repo, refresh_repo):
    access_repo.save(_record(token="access"))
    refresh_repo.save(_record(token="refresh"))

    assert access_repo.find_by_user_id(1).token == "access"
    assert refresh_repo.find_by_user_id(1).token == "refresh"


@pytest.mark.parametrize("repo_fixture", ["access_repo", "refresh_repo"])
def test_concurrent_insert_surfaces_as_conflict(request, repo_fixture, monkeypatch):
    repo = request.getfixturevalue(repo_fixture)
    repo.save(_record())
    # another writer inserted between the existence check and the flush
    monkeypatch.setattr(repo, "find_one", lambda **filters: None)

    with pytest.raises(ConflictError) as exc:
        repo.save(_record(token="t2"))
    assert exc.value.entity == repo.kind
    assert isinstance(exc.value.__cause__, IntegrityError)


@pytest.mark.parametrize(
    "message",
    [
        "UNIQUE constraint failed: access_tokens.user_id",
        'duplicate key value violates unique constraint "uq_access_tokens_user_id"',
    ],
)
def test_violates_matches_constraint_name_or_column(message):
    err = IntegrityError("INSERT", {}, Exception(message))
    assert violates(err, "uq_access_tokens_user_id", "access_tokens.user_id")
    assert not violates(err, "uq_refresh_tokens_user_id", "refresh_tokens.user_id")


def test_find_one_filters_only_on_whitelisted_fields(access_repo):
    access_repo.save(_record(token="stored"))

    # ``token`` is not filterable, so only ``user_id`` narrows the query
    row = access_repo.find_one(user_id=1, token="something else")
    assert row is not None and row.token == "stored"
    assert access_repo.find_one(user_id=2) is None
