"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between token
stores, the signer, the identity resolver and the application services.

The translation to HTTP responses (RFC 7807) is handled by
``tokenauth/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *patterns: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    *patterns : str
        Constraint name (e.g., 'uq_access_tokens_user_id') and any
        driver-specific spelling of it. SQLite reports the column instead
        ('access_tokens.user_id').

    Returns
    -------
    bool
        True if the IntegrityError message contains any of ``patterns``.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(pattern.lower() in message for pattern in patterns)


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, the signer or domain logic.
    - The API layer translates them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Raised on login with an unknown user, inactive account or wrong password."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """
    Raised when a token fails signature, expiry, shape or store-match checks.

    Only the explicit rotation path surfaces this to callers; passive checks
    turn it into a sentinel value.
    """

    def __init__(self, message: str = "Invalid JWT token") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User", "RefreshToken").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "AccessToken").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class UserServiceError(ServiceError):
    """
    Raised when the external user service answers with an unexpected status.

    :param status_code: HTTP status returned by the user service.
    :type status_code: int
    """

    def __init__(self, status_code: int, message: str = "User service request failed") -> None:
        super().__init__(f"{message} (status={status_code})")
        self.status_code = status_code
