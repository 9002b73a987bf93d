# tokenauth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass, field

from tokenauth.security.claims import AccessClaims

BEARER = "Bearer"

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Login name.
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for every operation that presents a refresh token.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    Either token may be ``None``: silent refresh returns only an access
    token, and a rejected silent refresh returns neither.

    :param access_token: Encoded access JWT.
    :type access_token: str | None
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str | None
    :param type: Authorization scheme, always ``"Bearer"``.
    :type type: str
    """

    access_token: str | None = None
    refresh_token: str | None = None
    type: str = BEARER

    @classmethod
    def empty(cls) -> TokenPairOut:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.access_token is None and self.refresh_token is None


@dataclass(frozen=True, slots=True)
class AuthInfo:
    """
    Identity of the caller, derived from a verified access token.

    :param username: Token subject.
    :param firstname: Given name claim.
    :param lastname: Family name claim.
    :param roles: Authorities claim.
    """

    username: str
    firstname: str = ""
    lastname: str = ""
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_claims(cls, claims: AccessClaims) -> AuthInfo:
        return cls(
            username=claims.subject,
            firstname=claims.firstname,
            lastname=claims.lastname,
            roles=claims.authorities,
        )
