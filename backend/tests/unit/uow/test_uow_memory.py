from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tokenauth.services._shared.ports import TokenRecord
from tokenauth.uow.memory_uow import InMemoryUnitOfWork

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _record(user_id: int, token: str) -> TokenRecord:
    return TokenRecord(user_id, token, NOW, NOW + timedelta(minutes=5))


def test_commit_applies_both_stores(memory_uow_factory, access_store, refresh_store):
    with memory_uow_factory() as uow:
        uow.access_tokens.save(_record(1, "a"))
        uow.refresh_tokens.save(_record(1, "r"))
        assert access_store.find_by_user_id(1) is None  # not yet visible

    assert access_store.find_by_user_id(1).token == "a"
    assert refresh_store.find_by_user_id(1).token == "r"


def test_exception_rolls_back_both_stores(memory_uow_factory, access_store, refresh_store):
    access_store.save(_record(1, "a"))
    refresh_store.save(_record(1, "r"))

    with pytest.raises(RuntimeError):
        with memory_uow_factory() as uow:
            uow.refresh_tokens.delete(1)
            raise RuntimeError("boom")

    assert access_store.find_by_user_id(1).token == "a"
    assert refresh_store.find_by_user_id(1).token == "r"


def test_explicit_rollback_discards_pending(access_store, refresh_store):
    uow = InMemoryUnitOfWork(access_tokens=access_store, refresh_tokens=refresh_store)
    uow.access_tokens.save(_record(2, "a"))
    uow.rollback()
    uow.commit()
    assert access_store.find_by_user_id(2) is None
