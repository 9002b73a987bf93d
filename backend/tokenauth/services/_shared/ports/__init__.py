"""
tokenauth.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token persistence and user lookup.

These ports decouple the service layer from concrete implementations
of token storage and of the external user service.

Modules
-------
- :mod:`token_store`:
    Defines :class:`~.TokenStore` and :class:`~.TokenRecord`, plus the
    in-memory :class:`~.InMemoryTokenStore` and its write-buffering
    :class:`~.StagedTokenStore` view.

- :mod:`user_provider`:
    Defines :class:`~.UserProvider`, the abstraction for fetching user records,
    and :class:`~.InMemoryUserProvider`.

Design Notes
------------
Concrete adapters (SQLAlchemy repositories, the HTTP user service client)
implement these interfaces under ``tokenauth.repositories`` and
``tokenauth.infra``.
"""

from __future__ import annotations

from .token_store import InMemoryTokenStore, StagedTokenStore, TokenRecord, TokenStore
from .user_provider import InMemoryUserProvider, UserProvider

__all__ = [
    "TokenRecord",
    "TokenStore",
    "InMemoryTokenStore",
    "StagedTokenStore",
    "UserProvider",
    "InMemoryUserProvider",
]
