# tokenauth/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from collections.abc import Callable

from tokenauth.security.claims import RefreshClaims
from tokenauth.security.passwords import verify_password
from tokenauth.security.signer import CredentialSigner
from tokenauth.services._shared.base import BaseService
from tokenauth.services._shared.errors import (
    AuthenticationError,
    InvalidTokenError,
    NotFoundError,
)
from tokenauth.services._shared.locks import UserLockRegistry
from tokenauth.services._shared.ports.token_store import TokenRecord, TokenStore
from tokenauth.services.auth.dto import AuthInfo, LoginIn, RefreshIn, TokenPairOut
from tokenauth.services.identity.dto import UserRecord
from tokenauth.services.identity.resolver import IdentityResolver
from tokenauth.uow.base import UnitOfWork

log = logging.getLogger(__name__)


def _no_auth_context() -> AuthInfo | None:
    return None


class AuthService(BaseService):
    """
    Credential lifecycle service (login / silent refresh / refresh / logout).

    Tokens are issued by a :class:`CredentialSigner`. The *current* access and
    refresh token of every user are persisted, one record per kind, so that a
    refresh token superseded by a later login or rotation stops working even
    while it still verifies cryptographically.

    Check-then-write sequences for one user run under that user's lock.
    """

    def __init__(
        self,
        *,
        signer: CredentialSigner,
        resolver: IdentityResolver,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        locks: UserLockRegistry | None = None,
        password_verifier: Callable[[str, str], bool] = verify_password,
        auth_context: Callable[[], AuthInfo | None] = _no_auth_context,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param signer: Issues and verifies access/refresh JWTs.
        :param resolver: Loads user records by username.
        :param uow_factory: Builds a unit of work exposing both token stores.
        :param locks: Per-user lock registry (a private one by default).
        :param password_verifier: ``(plain, hash) -> bool`` oracle.
        :param auth_context: Returns the identity bound to the current request.
        """
        super().__init__(uow_factory=uow_factory)
        self.signer = signer
        self.resolver = resolver
        self.locks = locks or UserLockRegistry()
        self.verify_password = password_verifier
        self._auth_context = auth_context

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Both records are upserted in one unit of work, replacing any pair a
        previous login left behind.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises AuthenticationError: Unknown user, inactive account or wrong password.
        """
        try:
            user = self.resolver.get_user_by_username(dto.username)
        except NotFoundError:
            log.warning("auth.login.failed reason=unknown_user", extra={"username": dto.username})
            raise AuthenticationError() from None
        if not user.is_active:
            log.warning("auth.login.failed reason=inactive", extra={"username": dto.username})
            raise AuthenticationError("Account is not active")
        if not self.verify_password(dto.password, user.password_hash):
            log.warning("auth.login.failed reason=bad_password", extra={"username": dto.username})
            raise AuthenticationError()

        with self.locks.hold(user.id):
            access, refresh = self._issue_pair(user)
            with self.rw_uow() as uow:
                self._upsert(uow.access_tokens, access)
                self._upsert(uow.refresh_tokens, refresh)

        log.info("auth.login.succeeded", extra={"username": user.username, "user_id": user.id})
        return TokenPairOut(access_token=access.token, refresh_token=refresh.token)

    # ------------------------------------------------------------------ #
    # Silent refresh (access token only)
    # ------------------------------------------------------------------ #

    def get_access_token(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange the current refresh token for a new access token.

        The refresh token itself is not rotated. Rejected tokens yield
        :meth:`TokenPairOut.empty` instead of raising.

        :raises NotFoundError: If the token subject no longer exists.
        """
        if not self.signer.validate_refresh_token(dto.refresh_token):
            log.debug("auth.silent_refresh.miss reason=invalid_token")
            return TokenPairOut.empty()

        claims = self.signer.get_refresh_claims(dto.refresh_token)
        user = self.resolver.get_user_by_username(claims.subject)

        with self.locks.hold(user.id):
            with self.rw_uow() as uow:
                if not self._matches_stored(uow.refresh_tokens, user, dto.refresh_token):
                    log.debug(
                        "auth.silent_refresh.miss reason=superseded",
                        extra={"user_id": user.id},
                    )
                    return TokenPairOut.empty()
                access = self._issue_access(user)
                self._upsert(uow.access_tokens, access)

        return TokenPairOut(access_token=access.token)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate the refresh token and emit a new token pair.

        :raises InvalidTokenError: If the token does not verify or is not the
                                   user's current refresh token.
        :raises NotFoundError: If the token subject no longer exists.
        """
        claims = self._require_refresh_claims(dto.refresh_token)
        user = self.resolver.get_user_by_username(claims.subject)

        with self.locks.hold(user.id):
            with self.rw_uow() as uow:
                if not self._matches_stored(uow.refresh_tokens, user, dto.refresh_token):
                    log.warning(
                        "auth.refresh.rejected reason=superseded",
                        extra={"user_id": user.id},
                    )
                    raise InvalidTokenError()
                access, refresh = self._issue_pair(user)
                self._upsert(uow.access_tokens, access)
                uow.refresh_tokens.update(user.id, refresh)

        log.info("auth.refresh.rotated", extra={"user_id": user.id})
        return TokenPairOut(access_token=access.token, refresh_token=refresh.token)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: RefreshIn) -> bool:
        """
        Delete both stored tokens of the refresh token's owner.

        :returns: ``False`` for a token that does not verify, else ``True``.
        :raises NotFoundError: If the token subject no longer exists.
        """
        if not self.signer.validate_refresh_token(dto.refresh_token):
            return False

        claims = self.signer.get_refresh_claims(dto.refresh_token)
        user = self.resolver.get_user_by_username(claims.subject)

        with self.locks.hold(user.id):
            with self.rw_uow() as uow:
                uow.refresh_tokens.delete(user.id)
                uow.access_tokens.delete(user.id)

        log.info("auth.logout", extra={"user_id": user.id})
        return True

    # ------------------------------------------------------------------ #
    # Stateless checks
    # ------------------------------------------------------------------ #

    def validate(self, dto: RefreshIn) -> bool:
        """Signature and expiry check of a refresh token; no store lookup."""
        return self.signer.validate_refresh_token(dto.refresh_token)

    def get_auth_info(self) -> AuthInfo | None:
        """Identity bound to the current request, if it is authenticated."""
        return self._auth_context()

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _require_refresh_claims(self, token: str) -> RefreshClaims:
        if not self.signer.validate_refresh_token(token):
            log.warning("auth.refresh.rejected reason=invalid_token")
            raise InvalidTokenError()
        return self.signer.get_refresh_claims(token)

    def _issue_access(self, user: UserRecord) -> TokenRecord:
        token = self.signer.generate_access_token(user)
        claims = self.signer.get_access_claims(token)
        return TokenRecord(user.id, token, claims.issued_at, claims.expires_at)

    def _issue_refresh(self, user: UserRecord) -> TokenRecord:
        token = self.signer.generate_refresh_token(user)
        claims = self.signer.get_refresh_claims(token)
        return TokenRecord(user.id, token, claims.issued_at, claims.expires_at)

    def _issue_pair(self, user: UserRecord) -> tuple[TokenRecord, TokenRecord]:
        return self._issue_access(user), self._issue_refresh(user)

    @staticmethod
    def _matches_stored(store: TokenStore, user: UserRecord, presented: str) -> bool:
        stored = store.find_by_user_id(user.id)
        if stored is None:
            return False
        return hmac.compare_digest(stored.token.encode("utf-8"), presented.encode("utf-8"))

    @staticmethod
    def _upsert(store: TokenStore, record: TokenRecord) -> None:
        if store.find_by_user_id(record.user_id) is not None:
            store.update(record.user_id, record)
        else:
            store.save(record)
