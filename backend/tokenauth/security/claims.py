"""Typed claim sets carried by access and refresh tokens."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, ClassVar

from tokenauth.services._shared.errors import InvalidTokenError

ACCESS_TYPE = "access"
REFRESH_TYPE = "refresh"


def _as_datetime(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """
    Claims of a refresh token: subject and validity window only.

    :ivar subject: Username the token was issued to (``sub``).
    :ivar issued_at: Issue time (``iat``), UTC.
    :ivar expires_at: Expiry time (``exp``), UTC.
    """

    kind: ClassVar[str] = REFRESH_TYPE

    subject: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RefreshClaims:
        try:
            return cls(
                subject=str(payload["sub"]),
                issued_at=_as_datetime(payload["iat"]),
                expires_at=_as_datetime(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed refresh token claims") from exc


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Claims of an access token.

    Access tokens additionally carry the user's names and roles so that
    authorization checks do not need a user lookup.

    :ivar subject: Username the token was issued to (``sub``).
    :ivar firstname: ``firstname`` claim.
    :ivar lastname: ``lastname`` claim.
    :ivar authorities: Role strings from the ``authorities`` claim.
    :ivar issued_at: Issue time (``iat``), UTC.
    :ivar expires_at: Expiry time (``exp``), UTC.
    """

    kind: ClassVar[str] = ACCESS_TYPE

    subject: str
    firstname: str
    lastname: str
    authorities: frozenset[str]
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AccessClaims:
        try:
            firstname = payload["firstname"]
            lastname = payload["lastname"]
            authorities = payload["authorities"]
            if not isinstance(firstname, str) or not isinstance(lastname, str):
                raise TypeError("names must be strings")
            if not isinstance(authorities, list) or not all(
                isinstance(role, str) for role in authorities
            ):
                raise TypeError("authorities must be a list of strings")
            return cls(
                subject=str(payload["sub"]),
                firstname=firstname,
                lastname=lastname,
                authorities=frozenset(authorities),
                issued_at=_as_datetime(payload["iat"]),
                expires_at=_as_datetime(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed access token claims") from exc

