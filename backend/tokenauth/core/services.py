"""Composition root: builds the auth service from application config."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from datetime import timedelta

from flask import Flask

from tokenauth.security.signer import CredentialSigner
from tokenauth.services._shared.locks import UserLockRegistry
from tokenauth.services._shared.ports.token_store import InMemoryTokenStore
from tokenauth.services._shared.ports.user_provider import UserProvider
from tokenauth.services.auth.service import AuthService
from tokenauth.services.identity.resolver import IdentityResolver
from tokenauth.uow.base import UnitOfWork
from tokenauth.uow.memory_uow import InMemoryUnitOfWork
from tokenauth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

BACKENDS = ("sqlalchemy", "memory")


def build_signer(config) -> CredentialSigner:
    """
    Build the signer from ``JWT_*`` settings.

    :raises ValueError: On missing, short or identical secrets.
    """
    return CredentialSigner.from_base64(
        config["JWT_ACCESS_SECRET"],
        config["JWT_REFRESH_SECRET"],
        access_ttl=timedelta(seconds=int(config["JWT_ACCESS_TTL_SECONDS"])),
        refresh_ttl=timedelta(seconds=int(config["JWT_REFRESH_TTL_SECONDS"])),
        algorithm=config.get("JWT_ALGORITHM", "HS256"),
    )


def build_uow_factory(backend: str) -> Callable[[], UnitOfWork]:
    """Return a zero-argument unit-of-work factory for ``backend``."""
    if backend == "sqlalchemy":
        return SQLAlchemyUnitOfWork
    if backend == "memory":
        return functools.partial(
            InMemoryUnitOfWork,
            access_tokens=InMemoryTokenStore("AccessToken"),
            refresh_tokens=InMemoryTokenStore("RefreshToken"),
        )
    raise ValueError(f"Unknown TOKEN_STORE_BACKEND {backend!r}; expected one of {BACKENDS}.")


def init_app(app: Flask, *, user_provider: UserProvider | None = None) -> None:
    """Wire the signer, user provider and token stores into an ``AuthService``.

    Parameters
    ----------
    app: flask.Flask
        Application whose config supplies secrets, lifetimes, the user service
        URL and ``TOKEN_STORE_BACKEND``. The service is stored in
        ``app.extensions["auth_service"]``.
    user_provider: UserProvider, optional
        Replaces the HTTP user service client (tests, local development).

    Notes
    -----
    ``JWT_SECRET_KEY`` is set to the raw access key so that
    ``flask-jwt-extended`` verifies bearer access tokens issued by the signer.
    """
    from tokenauth.api.deps import current_auth_info
    from tokenauth.infra.http.user_service_client import HttpUserServiceClient

    signer = build_signer(app.config)
    app.config["JWT_SECRET_KEY"] = signer.access_key
    app.config["JWT_ALGORITHM"] = signer.algorithm

    if user_provider is None:
        user_provider = HttpUserServiceClient(
            base_url=app.config["USER_SERVICE_URL"],
            timeout=float(app.config.get("USER_SERVICE_TIMEOUT", 5.0)),
        )

    backend = str(app.config.get("TOKEN_STORE_BACKEND", "sqlalchemy")).lower()
    service = AuthService(
        signer=signer,
        resolver=IdentityResolver(user_provider),
        uow_factory=build_uow_factory(backend),
        locks=UserLockRegistry(),
        auth_context=current_auth_info,
    )
    app.extensions["token_signer"] = signer
    app.extensions["auth_service"] = service
    log.info("auth_service.ready backend=%s", backend)
