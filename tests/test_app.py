"""
应用层：错误渲染、健康检查、CORS、配置
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fastapi_app.config.settings import Settings
from fastapi_app.middleware.cors import setup_cors
from fastapi_app.utils.errors import APIError, ErrorCode, ErrorResponse, SupabaseErrorMapper


def test_unknown_route(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"code": "NOT_FOUND", "message": "Not Found"}


def test_wrong_method(client):
    response = client.get("/auth/logout")

    assert response.status_code == 405
    assert response.json() == {"code": "METHOD_NOT_ALLOWED", "message": "Method Not Allowed"}
    assert response.headers["allow"] == "POST"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "framework": "FastAPI"}


class TestErrors:
    def test_details_are_omitted_when_absent(self):
        assert ErrorResponse(code="X", message="y").to_content() == {"code": "X", "message": "y"}

    def test_details_are_kept(self):
        error = APIError(400, ErrorCode.INVALID_INTERVAL, "bad", details="interval=weekly")

        assert error.to_response().to_content() == {
            "code": "INVALID_INTERVAL",
            "message": "bad",
            "details": "interval=weekly",
        }

    @pytest.mark.parametrize(
        "body, upstream_status, expected",
        [
            ({"code": 422}, 400, 422),
            ({"code": "weak_password"}, 422, 422),
            ({"code": True}, 401, 401),
            ({"code": 200}, 200, 500),
            ({}, 200, 500),
        ],
    )
    def test_supabase_status_resolution(self, body, upstream_status, expected):
        assert SupabaseErrorMapper.status_code(body, upstream_status) == expected

    def test_supabase_non_object_body(self):
        error = SupabaseErrorMapper.to_api_error(["unexpected"], 400)

        assert (error.status_code, error.code, error.message) == (400, "SUPABASE_ERROR", "Error from Supabase")


class TestCors:
    @staticmethod
    def build_client(monkeypatch, **env) -> TestClient:
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        app = FastAPI()

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        setup_cors(app, Settings())
        return TestClient(app)

    def test_wildcard_origin(self, monkeypatch):
        client = self.build_client(monkeypatch, CORS_ENABLED="true", CORS_ORIGIN="*")

        response = client.get("/ping", headers={"Origin": "https://anywhere.example"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_listed_origin_is_echoed(self, monkeypatch):
        client = self.build_client(
            monkeypatch, CORS_ENABLED="true", CORS_ORIGIN="http://localhost:4200, https://kuala.example"
        )

        response = client.get("/ping", headers={"Origin": "https://kuala.example"})

        assert response.headers["access-control-allow-origin"] == "https://kuala.example"

    def test_unlisted_origin_gets_no_header(self, monkeypatch):
        client = self.build_client(monkeypatch, CORS_ENABLED="true", CORS_ORIGIN="https://kuala.example")

        response = client.get("/ping", headers={"Origin": "https://evil.example"})

        assert "access-control-allow-origin" not in response.headers

    def test_preflight(self, monkeypatch):
        client = self.build_client(monkeypatch, CORS_ENABLED="true", CORS_ORIGIN="https://kuala.example")

        response = client.options(
            "/ping",
            headers={
                "Origin": "https://kuala.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://kuala.example"
        assert response.headers["access-control-max-age"] == "86400"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_disabled(self, monkeypatch):
        client = self.build_client(monkeypatch, CORS_ENABLED="false", CORS_ORIGIN="*")

        response = client.get("/ping", headers={"Origin": "https://kuala.example"})

        assert "access-control-allow-origin" not in response.headers


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in ("AUTH_OAUTH_PROVIDER", "AUTH_OAUTH_SCOPES", "KILLBILL_CREATED_BY", "CORS_ENABLED", "CORS_ORIGIN"):
            monkeypatch.delenv(key, raising=False)

        settings = Settings()

        assert settings.AUTH_OAUTH_PROVIDER == "keycloak"
        assert settings.AUTH_OAUTH_SCOPES == "openid"
        assert settings.KILLBILL_CREATED_BY == "kuala-api"
        assert settings.CORS_ENABLED is True
        assert settings.CORS_ORIGINS == ["*"]

    def test_summary_hides_secrets(self, env):
        summary = Settings().get_config_summary()

        assert "anon-key" not in str(summary)
        assert "kb-secret" not in str(summary)
        assert summary["auth_api_key_configured"] is True

    def test_http_timeout_uses_client_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("HTTP_TIMEOUT_SECONDS", raising=False)

        assert Settings().http_client_options() == {}

    def test_http_timeout_override(self, monkeypatch):
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")

        assert Settings().http_client_options() == {"timeout": 2.5}
