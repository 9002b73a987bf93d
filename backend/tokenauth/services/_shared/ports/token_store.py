from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from tokenauth.services._shared.errors import ConflictError, NotFoundError


@dataclass(frozen=True, slots=True)
class TokenRecord:
    """
    Current token of one kind (access or refresh) for one user.

    :ivar user_id: Owner user id (unique key within a store).
    :ivar token: Signed token string as handed to the client.
    :ivar issued_at: ``iat`` of the token (UTC).
    :ivar expires_at: ``exp`` of the token (UTC).
    """

    user_id: int
    token: str
    issued_at: datetime
    expires_at: datetime


class TokenStore(Protocol):
    """
    Persistence contract for one token kind, keyed by user id.

    A store holds at most one record per user. It is pure CRUD: choosing
    between ``save`` and ``update`` is the caller's job.
    """

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        """Return the user's record, if any."""

    def save(self, record: TokenRecord) -> None:
        """
        Insert a record.

        :raises ConflictError: If the user already has a record.
        """

    def update(self, user_id: int, record: TokenRecord) -> None:
        """
        Replace the user's record.

        :raises NotFoundError: If the user has no record.
        """

    def delete(self, user_id: int) -> None:
        """Remove the user's record. No-op when absent."""


def _check_owner(user_id: int, record: TokenRecord) -> None:
    if record.user_id != user_id:
        raise ValueError(f"Record belongs to user {record.user_id}, not {user_id}.")


class InMemoryTokenStore(TokenStore):
    """
    Dict-backed token store.

    .. note::
       Uses a threading lock so that each call is atomic. Multi-call
       sequences (check-then-write) are made atomic by the caller.
    """

    def __init__(self, kind: str = "Token") -> None:
        self.kind = kind
        self._records: dict[int, TokenRecord] = {}
        self._lock = threading.Lock()

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        with self._lock:
            return self._records.get(user_id)

    def save(self, record: TokenRecord) -> None:
        with self._lock:
            if record.user_id in self._records:
                raise ConflictError(self.kind, f"user {record.user_id} already has a token")
            self._records[record.user_id] = record

    def update(self, user_id: int, record: TokenRecord) -> None:
        _check_owner(user_id, record)
        with self._lock:
            if user_id not in self._records:
                raise NotFoundError(self.kind, user_id)
            self._records[user_id] = record

    def delete(self, user_id: int) -> None:
        with self._lock:
            self._records.pop(user_id, None)

    def apply(self, changes: Mapping[int, TokenRecord | None]) -> None:
        """Apply staged writes in one step (``None`` means delete)."""
        with self._lock:
            for user_id, record in changes.items():
                if record is None:
                    self._records.pop(user_id, None)
                else:
                    self._records[user_id] = record

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class StagedTokenStore(TokenStore):
    """
    Write-buffering view over an :class:`InMemoryTokenStore`.

    Reads see staged writes first, then the backing store. Nothing reaches the
    backing store until :meth:`commit`; :meth:`discard` drops the buffer.
    """

    def __init__(self, base: InMemoryTokenStore) -> None:
        self.base = base
        self.kind = base.kind
        self._pending: dict[int, TokenRecord | None] = {}

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        if user_id in self._pending:
            return self._pending[user_id]
        return self.base.find_by_user_id(user_id)

    def save(self, record: TokenRecord) -> None:
        if self.find_by_user_id(record.user_id) is not None:
            raise ConflictError(self.kind, f"user {record.user_id} already has a token")
        self._pending[record.user_id] = record

    def update(self, user_id: int, record: TokenRecord) -> None:
        _check_owner(user_id, record)
        if self.find_by_user_id(user_id) is None:
            raise NotFoundError(self.kind, user_id)
        self._pending[user_id] = record

    def delete(self, user_id: int) -> None:
        self._pending[user_id] = None

    def commit(self) -> None:
        self.base.apply(self._pending)
        self._pending.clear()

    def discard(self) -> None:
        self._pending.clear()
