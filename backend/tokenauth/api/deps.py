"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, has_request_context, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from tokenauth.core.errors import Unauthorized
from tokenauth.security.claims import AccessClaims
from tokenauth.services._shared.errors import InvalidTokenError
from tokenauth.services.auth.dto import AuthInfo
from tokenauth.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])


def get_auth_service() -> AuthService:
    """Return the :class:`AuthService` wired by ``tokenauth.core.services``."""

    return cast(AuthService, current_app.extensions["auth_service"])


def current_auth_info() -> AuthInfo | None:
    """Identity stored on ``flask.g`` by :func:`require_auth`, if any."""

    if not has_request_context():
        return None
    return cast(AuthInfo | None, g.get("auth_info"))


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token.

    The verified claims are bound to ``g.auth_info`` for the handler.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            verify_jwt_in_request(optional=False)
            claims = AccessClaims.from_payload(get_jwt())
        except (JWTExtendedException, PyJWTError, InvalidTokenError) as exc:
            raise Unauthorized(str(exc) or "Invalid access token", code="invalid_token") from exc
        g.auth_info = AuthInfo.from_claims(claims)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
