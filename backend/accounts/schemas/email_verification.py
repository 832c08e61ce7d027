"""Email verification Marshmallow schemas."""

from __future__ import annotations

from marshmallow import fields, validate

from .common import CamelCaseSchema, EmailOnlySchema, NormalizedEmail


class SendCodeSchema(EmailOnlySchema):
    """Send/resend request; ``expirationMinutes`` bounds come from config."""

    expiration_minutes = fields.Integer(load_default=None, validate=validate.Range(min=1))


class VerifyCodeSchema(CamelCaseSchema):
    email = NormalizedEmail(required=True)
    code = fields.String(
        required=True,
        validate=validate.Regexp(r"^\d{6}$", error="Verification code must be 6 digits"),
    )


class SendCodeResponseSchema(CamelCaseSchema):
    success = fields.Boolean(required=True)
    message = fields.String(required=True)
    expires_at = fields.AwareDateTime(required=True)
    code_id = fields.String(required=True)
    already_verified = fields.Boolean(required=True)


class VerifyCodeResponseSchema(CamelCaseSchema):
    success = fields.Boolean(required=True)
    message = fields.String(required=True)
    user_activated = fields.Boolean(required=True)
