"""SQLAlchemy token stores backing the ``TokenStore`` port."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Generic, TypeVar

from sqlalchemy.exc import IntegrityError

from tokenauth.models.token import AccessToken, RefreshToken
from tokenauth.repositories.base import BaseRepository
from tokenauth.services._shared.errors import ConflictError, NotFoundError, violates
from tokenauth.services._shared.ports.token_store import TokenRecord

T = TypeVar("T", AccessToken, RefreshToken)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SQLAlchemyTokenStore(BaseRepository[T], Generic[T]):
    """Persistence-only token store for one token table.

    Subclasses set ``model``, ``kind`` (entity name in errors) and the
    unique constraint guarding ``user_id``.
    """

    kind: str
    unique_constraint: str

    def _filterable_fields(self):
        return {"user_id": self.model.user_id}

    @staticmethod
    def _to_record(row: AccessToken | RefreshToken) -> TokenRecord:
        return TokenRecord(
            user_id=row.user_id,
            token=row.token,
            issued_at=_as_utc(row.issued_at),
            expires_at=_as_utc(row.expires_at),
        )

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        row = self.find_one(user_id=user_id)
        return self._to_record(row) if row is not None else None

    def save(self, record: TokenRecord) -> None:
        """
        Insert ``record``.

        :raises ConflictError: If the user already has a row in this table.
        """
        if self.find_one(user_id=record.user_id) is not None:
            raise ConflictError(self.kind, f"user {record.user_id} already has a token")
        row = self.model(
            user_id=record.user_id,
            token=record.token,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
        )
        try:
            self.add(row)
        except IntegrityError as exc:
            # Concurrent insert from another process.
            if violates(exc, self.unique_constraint, f"{self.model.__tablename__}.user_id"):
                raise ConflictError(
                    self.kind, f"user {record.user_id} already has a token"
                ) from exc
            raise

    def update(self, user_id: int, record: TokenRecord) -> None:
        """
        Overwrite the user's row with ``record``.

        :raises NotFoundError: If the user has no row in this table.
        """
        if record.user_id != user_id:
            raise ValueError(f"Record belongs to user {record.user_id}, not {user_id}.")
        row = self.find_one(user_id=user_id)
        if row is None:
            raise NotFoundError(self.kind, user_id)
        row.token = record.token
        row.issued_at = record.issued_at
        row.expires_at = record.expires_at
        self.flush()

    def delete(self, user_id: int) -> None:
        row = self.find_one(user_id=user_id)
        if row is not None:
            self.remove(row)


class AccessTokenRepository(SQLAlchemyTokenStore[AccessToken]):
    model = AccessToken
    kind = "AccessToken"
    unique_constraint = "uq_access_tokens_user_id"


class RefreshTokenRepository(SQLAlchemyTokenStore[RefreshToken]):
    model = RefreshToken
    kind = "RefreshToken"
    unique_constraint = "uq_refresh_tokens_user_id"
