# tokenauth/security/signer.py
from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from tokenauth.security.claims import ACCESS_TYPE, REFRESH_TYPE, AccessClaims, RefreshClaims
from tokenauth.services._shared.errors import InvalidTokenError
from tokenauth.services.identity.dto import UserRecord

log = logging.getLogger(__name__)

MIN_KEY_BYTES = 32  # 256 bits
DEFAULT_ACCESS_TTL = timedelta(minutes=5)
DEFAULT_REFRESH_TTL = timedelta(days=7)
DEFAULT_ALGORITHM = "HS256"


def decode_secret(value: str | bytes) -> bytes:
    """
    Decode a base64-encoded signing secret into raw key bytes.

    :param value: Base64 text as provisioned in the environment.
    :type value: str | bytes
    :returns: Raw key material.
    :rtype: bytes
    :raises ValueError: If ``value`` is not valid base64.
    """
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Signing secret must be valid base64.") from exc


class CredentialSigner:
    """
    Stateless builder and verifier of access/refresh JWTs.

    Access and refresh tokens are signed with two distinct HMAC keys, so a
    token of one class never verifies as the other.

    :param access_key: Raw key for access tokens (>= 32 bytes).
    :type access_key: bytes
    :param refresh_key: Raw key for refresh tokens (>= 32 bytes, != access).
    :type refresh_key: bytes
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    :param algorithm: HMAC JWS algorithm (``HS256``, ``HS384`` or ``HS512``).
    :type algorithm: str
    :raises ValueError: On short, identical keys or non-positive lifetimes.
    """

    def __init__(
        self,
        *,
        access_key: bytes,
        refresh_key: bytes,
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        algorithm: str = DEFAULT_ALGORITHM,
    ) -> None:
        if len(access_key) < MIN_KEY_BYTES or len(refresh_key) < MIN_KEY_BYTES:
            raise ValueError(f"Signing keys must be at least {MIN_KEY_BYTES * 8} bits long.")
        if access_key == refresh_key:
            raise ValueError("Access and refresh signing keys must differ.")
        if access_ttl <= timedelta(0) or refresh_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")
        if not algorithm.startswith("HS"):
            raise ValueError(f"Unsupported signing algorithm: {algorithm!r}")

        self._access_key = access_key
        self._refresh_key = refresh_key
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    @classmethod
    def from_base64(
        cls, access_secret: str | bytes, refresh_secret: str | bytes, **kwargs: Any
    ) -> CredentialSigner:
        """Build a signer from base64-encoded secrets (environment format)."""
        return cls(
            access_key=decode_secret(access_secret),
            refresh_key=decode_secret(refresh_secret),
            **kwargs,
        )

    @property
    def access_key(self) -> bytes:
        """Raw access key, shared with the request-level JWT verifier."""
        return self._access_key

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    def generate_access_token(self, user: UserRecord) -> str:
        """
        Issue an access token for ``user``.

        :returns: Compact JWS carrying ``sub``, ``firstname``, ``lastname``,
                  ``authorities``, ``iat`` and ``exp``.
        :rtype: str
        """
        now = self.now_utc()
        payload: dict[str, Any] = {
            "sub": user.username,
            "type": ACCESS_TYPE,
            "firstname": user.firstname,
            "lastname": user.lastname,
            "authorities": sorted(user.roles),
            "iat": int(now.timestamp()),
            "exp": int((now + self.access_ttl).timestamp()),
        }
        return jwt.encode(payload, self._access_key, algorithm=self.algorithm)

    def generate_refresh_token(self, user: UserRecord) -> str:
        """
        Issue a refresh token for ``user``.

        :returns: Compact JWS carrying ``sub``, ``iat`` and ``exp`` only.
        :rtype: str
        """
        now = self.now_utc()
        payload: dict[str, Any] = {
            "sub": user.username,
            "type": REFRESH_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + self.refresh_ttl).timestamp()),
        }
        return jwt.encode(payload, self._refresh_key, algorithm=self.algorithm)

    # ------------------------------------------------------------------ #
    # Validation (never raises)
    # ------------------------------------------------------------------ #

    def validate_access_token(self, token: str) -> bool:
        return self._is_valid(self.get_access_claims, token)

    def validate_refresh_token(self, token: str) -> bool:
        return self._is_valid(self.get_refresh_claims, token)

    @staticmethod
    def _is_valid(parse: Callable[[str], object], token: str) -> bool:
        try:
            parse(token)
        except InvalidTokenError as exc:
            log.debug("token.rejected reason=%s", exc)
            return False
        return True

    # ------------------------------------------------------------------ #
    # Claim decoding
    # ------------------------------------------------------------------ #

    def get_access_claims(self, token: str) -> AccessClaims:
        """
        Decode an access token that already passed validation.

        :raises InvalidTokenError: If the token does not verify.
        """
        return AccessClaims.from_payload(self._decode(token, self._access_key, ACCESS_TYPE))

    def get_refresh_claims(self, token: str) -> RefreshClaims:
        """
        Decode a refresh token that already passed validation.

        :raises InvalidTokenError: If the token does not verify.
        """
        return RefreshClaims.from_payload(self._decode(token, self._refresh_key, REFRESH_TYPE))

    def _decode(self, token: str, key: bytes, expected_type: str) -> dict[str, Any]:
        # PyJWT rejects exp <= now, leeway defaults to zero.
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
        if payload.get("type") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")
        return payload

    @staticmethod
    def now_utc() -> datetime:
        # JWT numeric dates have second precision.
        return datetime.now(UTC).replace(microsecond=0)
