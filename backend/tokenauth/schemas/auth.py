"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=255))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    """Input payload carrying a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenResponseSchema(Schema):
    """Response payload containing a token pair (either token may be null)."""

    type = fields.String(dump_default="Bearer")
    access_token = fields.String(allow_none=True)
    refresh_token = fields.String(allow_none=True)


class AuthInfoSchema(Schema):
    """Response payload exposing the identity of the authenticated caller."""

    username = fields.String(required=True)
    firstname = fields.String()
    lastname = fields.String()
    roles = fields.Method("_sorted_roles")

    def _sorted_roles(self, obj) -> list[str]:
        return sorted(obj.roles)
