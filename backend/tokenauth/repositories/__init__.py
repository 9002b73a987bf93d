"""Repository package exposing persistence-layer access for token tables."""

from __future__ import annotations

from tokenauth.repositories.base import BaseRepository
from tokenauth.repositories.token import (
    AccessTokenRepository,
    RefreshTokenRepository,
    SQLAlchemyTokenStore,
)

__all__ = [
    "BaseRepository",
    "SQLAlchemyTokenStore",
    "AccessTokenRepository",
    "RefreshTokenRepository",
]
