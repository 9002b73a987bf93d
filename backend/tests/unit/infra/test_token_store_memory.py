"""
Contract tests for the in-memory token store and its staged view.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tokenauth.services._shared.errors import ConflictError, NotFoundError
from tokenauth.services._shared.ports import InMemoryTokenStore, StagedTokenStore, TokenRecord

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _record(user_id: int = 1, token: str = "t1") -> TokenRecord:
    return TokenRecord(user_id, token, NOW, NOW + timedelta(minutes=5))


@pytest.fixture()
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore("AccessToken")


def test_save_then_find(store):
    store.save(_record())
    assert store.find_by_user_id(1) == _record()
    assert store.find_by_user_id(2) is None


def test_save_twice_conflicts(store):
    store.save(_record())
    with pytest.raises(ConflictError) as exc:
        store.save(_record(token="t2"))
    assert exc.value.entity == "AccessToken"
    assert store.find_by_user_id(1).token == "t1"


def test_update_replaces_record(store):
    store.save(_record())
    store.update(1, _record(token="t2"))
    assert store.find_by_user_id(1).token == "t2"
    assert len(store) == 1


def test_update_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.update(1, _record())


def test_update_with_foreign_record_is_rejected(store):
    store.save(_record())
    with pytest.raises(ValueError):
        store.update(1, _record(user_id=2))


def test_delete_is_idempotent(store):
    store.save(_record())
    store.delete(1)
    store.delete(1)
    assert store.find_by_user_id(1) is None


# ------------------------------ Staged view -------------------------------- #
def test_staged_writes_are_invisible_until_commit(store):
    staged = StagedTokenStore(store)
    staged.save(_record())

    assert staged.find_by_user_id(1) == _record()
    assert store.find_by_user_id(1) is None

    staged.commit()
    assert store.find_by_user_id(1) == _record()


def test_staged_discard_drops_buffer(store):
    store.save(_record())
    staged = StagedTokenStore(store)
    staged.delete(1)
    assert staged.find_by_user_id(1) is None

    staged.discard()
    assert staged.find_by_user_id(1) == _record()
    assert store.find_by_user_id(1) == _record()


def test_staged_enforces_store_contract(store):
    store.save(_record())
    staged = StagedTokenStore(store)
    with pytest.raises(ConflictError):
        staged.save(_record(token="t2"))
    with pytest.raises(NotFoundError):
        staged.update(2, _record(user_id=2))
