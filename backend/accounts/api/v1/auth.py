"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from accounts.api.deps import (
    current_user,
    json_body,
    json_response,
    optional_token_payload,
    request_token_payload,
    require_auth,
    timing,
)
from accounts.core.container import get_services
from accounts.core.errors import NotImplementedYet
from accounts.schemas import (
    LoginResponseSchema,
    LoginSchema,
    LoginStatsSchema,
    LogoutResponseSchema,
    LogoutSchema,
    RefreshResponseSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    UnlockResponseSchema,
    UnlockSchema,
    UserSchema,
    VerifyTokenResponseSchema,
    VerifyTokenSchema,
)
from accounts.services._shared.errors import TokenError
from accounts.services.auth.dto import LoginIn, LogoutIn, RefreshIn, VerifyTokenOut
from accounts.services.email_verification.dto import SendCodeIn
from accounts.services.registration.dto import UserRegistrationIn, UserRegistrationOut

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
register_response_schema = RegisterResponseSchema()
login_schema = LoginSchema()
login_response_schema = LoginResponseSchema()
refresh_schema = RefreshSchema()
refresh_response_schema = RefreshResponseSchema()
verify_schema = VerifyTokenSchema()
verify_response_schema = VerifyTokenResponseSchema()
logout_schema = LogoutSchema()
logout_response_schema = LogoutResponseSchema()
unlock_schema = UnlockSchema()
unlock_response_schema = UnlockResponseSchema()
user_schema = UserSchema()
stats_schema = LoginStatsSchema()


@bp.post("/register")
@timing
def register():
    """Create an inactive account and mail its first verification code."""

    payload = register_schema.load(json_body())
    services = get_services()

    def _send_first_code(result: UserRegistrationOut) -> None:
        services.verification.send(SendCodeIn(email=result.user.email))

    result = services.registration.register(
        UserRegistrationIn(**payload), on_committed=_send_first_code
    )
    return json_response({"data": register_response_schema.dump(result)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(json_body())
    result = get_services().auth.login(LoginIn(**data))
    return json_response({"data": login_response_schema.dump(result)})


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new pair."""

    data = refresh_schema.load(json_body())
    result = get_services().auth.refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": refresh_response_schema.dump(result)})


@bp.post("/verify")
@timing
def verify():
    """Introspect a token from the body or the ``Authorization`` header."""

    body = json_body()
    auth = get_services().auth
    if body:
        result = auth.verify_token(verify_schema.load(body)["token"])
    else:
        try:
            result = auth.check_payload(request_token_payload())
        except TokenError as exc:
            result = VerifyTokenOut(valid=False, message=str(exc), reason=exc.reason)
    return json_response({"data": verify_response_schema.dump(result)})


@bp.post("/logout")
@timing
def logout():
    """Acknowledge logout; tokens stay valid until they expire."""

    data = logout_schema.load(json_body())
    if data.get("refresh_token"):
        dto = LogoutIn(token=data["refresh_token"])
    else:
        dto = LogoutIn(payload=optional_token_payload())
    result = get_services().auth.logout(dto)
    return json_response({"data": logout_response_schema.dump(result)})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user."""

    return json_response({"data": user_schema.dump(current_user())})


@bp.get("/stats")
@require_auth
@timing
def stats():
    """Return login statistics for the authenticated user."""

    result = get_services().credentials.get_login_stats(current_user().id)
    return json_response({"data": stats_schema.dump(result)})


@bp.post("/unlock")
@require_auth(role="admin")
@timing
def unlock():
    """Clear the lock of another account (admin only)."""

    data = unlock_schema.load(json_body())
    result = get_services().credentials.unlock(data["email"])
    return json_response({"data": unlock_response_schema.dump(result)})


@bp.post("/forgot-password")
@bp.post("/reset-password")
@bp.post("/change-password")
def password_flows():
    """Password recovery is not available yet."""

    raise NotImplementedYet("Password management is not implemented")
