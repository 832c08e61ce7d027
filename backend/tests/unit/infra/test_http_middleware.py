"""CORS policy and reverse-proxy header handling."""

from __future__ import annotations

import pytest
from accounts.core import proxy
from accounts.core.cors import parse_origins
from flask import Flask, request
from werkzeug.middleware.proxy_fix import ProxyFix

ALLOWED_ORIGIN = "http://localhost:5173"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("", []),
        ("*", ["*"]),
        ("https://a.example, https://b.example ,", ["https://a.example", "https://b.example"]),
    ],
)
def test_parse_origins(raw, expected):
    assert parse_origins(raw) == expected


def test_preflight_allows_configured_origin(client):
    response = client.options(
        "/api/v1/auth/login",
        headers={
            "Origin": ALLOWED_ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )

    assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    allowed = response.headers["Access-Control-Allow-Headers"].lower()
    assert "authorization" in allowed


def test_request_id_is_exposed_to_browsers(client):
    response = client.get("/api/v1/health", headers={"Origin": ALLOWED_ORIGIN})

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers["Access-Control-Expose-Headers"]


def test_unknown_origin_gets_no_cors_headers(client):
    response = client.get("/api/v1/health", headers={"Origin": "https://evil.example"})

    assert "Access-Control-Allow-Origin" not in response.headers


def _bare_app(**config) -> Flask:
    app = Flask(__name__)
    app.config.update(config)

    @app.get("/where")
    def where():
        return {"remote": request.remote_addr, "scheme": request.scheme}

    return app


def test_proxy_fix_trusts_configured_hops():
    app = _bare_app(USE_PROXYFIX=True, PROXYFIX_HOPS=2)
    proxy.init_app(app)

    assert isinstance(app.wsgi_app, ProxyFix)
    response = app.test_client().get(
        "/where",
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.2", "X-Forwarded-Proto": "https"},
    )
    assert response.get_json()["remote"] == "203.0.113.7"


def test_proxy_fix_can_be_disabled():
    app = _bare_app(USE_PROXYFIX=False)
    proxy.init_app(app)

    assert not isinstance(app.wsgi_app, ProxyFix)
