"""
In-memory implementation of UnitOfWork.

Writes are buffered in :class:`StagedTokenStore` views and applied to the
shared stores on commit, so a failing use-case leaves both stores untouched.
"""

from __future__ import annotations

from tokenauth.services._shared.ports.token_store import InMemoryTokenStore, StagedTokenStore
from tokenauth.uow.base import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(
        self,
        *,
        access_tokens: InMemoryTokenStore,
        refresh_tokens: InMemoryTokenStore,
    ) -> None:
        self.access_tokens = StagedTokenStore(access_tokens)
        self.refresh_tokens = StagedTokenStore(refresh_tokens)

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def commit(self) -> None:
        self.access_tokens.commit()
        self.refresh_tokens.commit()

    def rollback(self) -> None:
        self.access_tokens.discard()
        self.refresh_tokens.discard()
