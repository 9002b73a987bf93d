"""Persisted access and refresh tokens, one row per user and kind."""

from __future__ import annotations

from sqlalchemy import UniqueConstraint

from tokenauth.core.extensions import db

from .base import PKMixin, ReprMixin, TokenColumnsMixin


class AccessToken(PKMixin, ReprMixin, TokenColumnsMixin, db.Model):
    """Currently valid access token of a user."""

    __tablename__ = "access_tokens"

    __table_args__ = (UniqueConstraint("user_id", name="uq_access_tokens_user_id"),)


class RefreshToken(PKMixin, ReprMixin, TokenColumnsMixin, db.Model):
    """
    Currently valid refresh token of a user.

    Only the token stored here may be exchanged for new tokens; an older
    refresh token that still verifies cryptographically is rejected.
    """

    __tablename__ = "refresh_tokens"

    __table_args__ = (UniqueConstraint("user_id", name="uq_refresh_tokens_user_id"),)
