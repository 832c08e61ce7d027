"""Email verification endpoints."""

from __future__ import annotations

from flask import Blueprint

from accounts.api.deps import json_body, json_response, timing
from accounts.core.container import get_services
from accounts.schemas import (
    SendCodeResponseSchema,
    SendCodeSchema,
    VerifyCodeResponseSchema,
    VerifyCodeSchema,
)
from accounts.services.email_verification.dto import SendCodeIn, VerifyCodeIn

bp = Blueprint("email_verification", __name__)

send_schema = SendCodeSchema()
send_response_schema = SendCodeResponseSchema()
verify_schema = VerifyCodeSchema()
verify_response_schema = VerifyCodeResponseSchema()


@bp.post("/send")
@timing
def send_code():
    """Issue a verification code for an unverified account."""

    data = send_schema.load(json_body())
    result = get_services().verification.send(SendCodeIn(**data))
    return json_response({"data": send_response_schema.dump(result)})


@bp.post("/resend")
@timing
def resend_code():
    """Issue a new code unless the current one is too recent."""

    data = send_schema.load(json_body())
    result = get_services().verification.resend(SendCodeIn(**data))
    return json_response({"data": send_response_schema.dump(result)})


@bp.post("/verify")
@timing
def verify_code():
    """Redeem a code and activate the account."""

    data = verify_schema.load(json_body())
    result = get_services().verification.verify(VerifyCodeIn(**data))
    return json_response({"data": verify_response_schema.dump(result)})
