"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthInfoSchema, LoginSchema, RefreshTokenSchema, TokenResponseSchema

__all__ = [
    "AuthInfoSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "TokenResponseSchema",
]
