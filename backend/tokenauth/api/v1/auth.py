"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from tokenauth.api.deps import get_auth_service, json_response, require_auth, timing
from tokenauth.schemas import (
    AuthInfoSchema,
    LoginSchema,
    RefreshTokenSchema,
    TokenResponseSchema,
)
from tokenauth.services.auth.dto import LoginIn, RefreshIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
token_schema = TokenResponseSchema()
auth_info_schema = AuthInfoSchema()


def _refresh_in() -> RefreshIn:
    data = refresh_schema.load(request.get_json(silent=True) or {})
    return RefreshIn(refresh_token=data["refresh_token"])


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().login(LoginIn(username=data["username"], password=data["password"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/token")
@timing
def access_token():
    """Silent refresh: new access token, or null tokens when not signed in."""

    pair = get_auth_service().get_access_token(_refresh_in())
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token and issue a new pair (401 when rejected)."""

    pair = get_auth_service().refresh(_refresh_in())
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Drop the stored tokens of the refresh token's owner."""

    success = get_auth_service().logout(_refresh_in())
    return json_response({"data": {"success": success}})


@bp.post("/validate")
@timing
def validate():
    """Report whether a refresh token verifies (no store lookup)."""

    valid = get_auth_service().validate(_refresh_in())
    return json_response({"data": {"valid": valid}})


@bp.get("/info")
@require_auth
@timing
def info():
    """Return the identity carried by the bearer access token."""

    auth_info = get_auth_service().get_auth_info()
    return json_response({"data": auth_info_schema.dump(auth_info)})
