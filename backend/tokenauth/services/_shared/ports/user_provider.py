from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from tokenauth.services.identity.dto import UserRecord


class UserProvider(Protocol):
    """Port for the external source of user records."""

    def find_by_username(self, username: str) -> UserRecord | None: ...


class InMemoryUserProvider(UserProvider):
    """Dict-backed user provider for unit tests and local development."""

    def __init__(self, users: Iterable[UserRecord] = ()) -> None:
        self._by_username: dict[str, UserRecord] = {}
        for user in users:
            self.add(user)

    def add(self, user: UserRecord) -> None:
        self._by_username[user.username] = user

    def remove(self, username: str) -> None:
        self._by_username.pop(username, None)

    def find_by_username(self, username: str) -> UserRecord | None:
        return self._by_username.get(username)
