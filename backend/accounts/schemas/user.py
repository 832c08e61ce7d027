"""User representation schemas."""

from __future__ import annotations

from marshmallow import fields

from .common import CamelCaseSchema


class UserSchema(CamelCaseSchema):
    """Public user payload (never includes credentials)."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    role = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    last_login_at = fields.AwareDateTime(allow_none=True)


class LoginStatsSchema(CamelCaseSchema):
    """Login statistics for the current user."""

    user_id = fields.Integer(required=True)
    last_login_at = fields.AwareDateTime(allow_none=True)
    failed_attempts = fields.Integer(required=True)
    is_locked = fields.Boolean(required=True)
    locked_until = fields.AwareDateTime(allow_none=True)
    minutes_until_unlock = fields.Integer(required=True)
