"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import fields, validate

from .common import CamelCaseSchema, EmailOnlySchema, NormalizedEmail
from .user import UserSchema

PASSWORD_RULE = validate.Regexp(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)",
    error=(
        "Password must contain at least one uppercase letter, "
        "one lowercase letter, and one number"
    ),
)
NAME_RULE = validate.Regexp(
    r"^[^\W\d_]+(?:[\s'-][^\W\d_]+)*$",
    error="Name can only contain letters and spaces",
)

# ----------------------------- Requests ----------------------------------- #


class RegisterSchema(CamelCaseSchema):
    """Input payload for account registration."""

    email = NormalizedEmail(required=True)
    password = fields.String(
        required=True, validate=[validate.Length(min=6, max=100), PASSWORD_RULE]
    )
    first_name = fields.String(required=True, validate=[validate.Length(min=1, max=50), NAME_RULE])
    last_name = fields.String(required=True, validate=[validate.Length(min=1, max=50), NAME_RULE])


class LoginSchema(CamelCaseSchema):
    """Input payload for authenticating a user."""

    email = NormalizedEmail(required=True)
    password = fields.String(required=True, validate=validate.Length(min=1, max=100))
    remember_me = fields.Boolean(load_default=False)


class RefreshSchema(CamelCaseSchema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class VerifyTokenSchema(CamelCaseSchema):
    token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(CamelCaseSchema):
    """Logout body; the token may come from the ``Authorization`` header instead."""

    refresh_token = fields.String(load_default=None)


class UnlockSchema(EmailOnlySchema):
    """Admin request to unlock ``email``."""


# ----------------------------- Responses ---------------------------------- #


class TokenPairSchema(CamelCaseSchema):
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class LoginResponseSchema(CamelCaseSchema):
    """Successful login: user, tokens and the access lifetime."""

    message = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)
    expires_in = fields.String(required=True)


class RefreshResponseSchema(CamelCaseSchema):
    message = fields.String(required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)
    expires_in = fields.String(required=True)


class VerifyTokenResponseSchema(CamelCaseSchema):
    valid = fields.Boolean(required=True)
    message = fields.String(required=True)
    user = fields.Nested(UserSchema, allow_none=True)
    reason = fields.String(allow_none=True)


class LogoutResponseSchema(CamelCaseSchema):
    message = fields.String(required=True)
    logged_out_at = fields.AwareDateTime(required=True)


class RegisterResponseSchema(CamelCaseSchema):
    message = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)


class UnlockResponseSchema(CamelCaseSchema):
    message = fields.String(required=True)
    email = fields.Email(required=True)
    unlocked_at = fields.AwareDateTime(required=True)
