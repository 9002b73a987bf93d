"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Service-level
fixtures wire the auth service to in-memory token stores and a dict-backed
user provider.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from tests.helpers.users import make_user

from tokenauth.core.config import TestingConfig
from tokenauth.core.extensions import db as _db  # Flask-SQLAlchemy instance
from tokenauth.factory import create_app  # application factory under test
from tokenauth.security.signer import CredentialSigner
from tokenauth.services._shared.ports import InMemoryTokenStore, InMemoryUserProvider
from tokenauth.services.auth.service import AuthService
from tokenauth.services.identity.dto import UserRecord
from tokenauth.services.identity.resolver import IdentityResolver
from tokenauth.uow.memory_uow import InMemoryUnitOfWork


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Avoids hitting external services (a user provider is injected).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOKEN_STORE_BACKEND = "sqlalchemy"
    USER_SERVICE_URL = "http://users.test/api/v1"
    USE_PROXYFIX = False


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, user_provider=InMemoryUserProvider([make_user()]))
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- Auth service wired to in-memory collaborators ------------------------------
@pytest.fixture()
def signer() -> CredentialSigner:
    """Signer using the fixed testing secrets."""
    return CredentialSigner.from_base64(
        TestingConfig.JWT_ACCESS_SECRET, TestingConfig.JWT_REFRESH_SECRET
    )


@pytest.fixture()
def bob() -> UserRecord:
    return make_user()


@pytest.fixture()
def user_provider(bob) -> InMemoryUserProvider:
    return InMemoryUserProvider([bob])


@pytest.fixture()
def access_store() -> InMemoryTokenStore:
    return InMemoryTokenStore("AccessToken")


@pytest.fixture()
def refresh_store() -> InMemoryTokenStore:
    return InMemoryTokenStore("RefreshToken")


@pytest.fixture()
def memory_uow_factory(access_store, refresh_store) -> Callable[[], InMemoryUnitOfWork]:
    def _factory() -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(access_tokens=access_store, refresh_tokens=refresh_store)

    return _factory


@pytest.fixture()
def auth_service(signer, user_provider, memory_uow_factory) -> AuthService:
    """Build an AuthService wired to in-memory doubles."""
    return AuthService(
        signer=signer,
        resolver=IdentityResolver(user_provider),
        uow_factory=memory_uow_factory,
    )


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2026-01-01 12:00:00"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2026-01-01 12:00:00")

    return _factory
