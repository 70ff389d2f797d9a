"""
POST /auth/logout 与 GET /auth/me
"""
import httpx

from conftest import connect_error

USER = {
    "id": "8d0fd2b3-9ca7-4d9e-a95f-9e13dded323e",
    "aud": "authenticated",
    "email": "user@example.com",
    "email_confirmed_at": "2025-01-01T00:00:00Z",
    "app_metadata": {"provider": "keycloak", "providers": ["keycloak"]},
    "user_metadata": {"full_name": "Test User"},
    "identities": [],
}


class TestLogout:
    def test_missing_authorization(self, client, supabase):
        response = client.post("/auth/logout")

        assert response.status_code == 401
        assert response.json() == {"code": "MISSING_AUTHORIZATION", "message": "Authorization header is required"}
        assert supabase.requests == []

    def test_success_returns_no_content(self, client, supabase):
        supabase.on("POST", "/auth/v1/logout", httpx.Response(204))

        response = client.post("/auth/logout", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 204
        assert response.content == b""
        upstream = supabase.requests[0]
        assert upstream.headers["authorization"] == "Bearer token-1"
        assert upstream.headers["apikey"] == "anon-key"

    def test_supabase_error_is_mapped(self, client, supabase):
        supabase.on(
            "POST",
            "/auth/v1/logout",
            httpx.Response(401, json={"code": 401, "error_code": "bad_jwt", "msg": "invalid JWT"}),
        )

        response = client.post("/auth/logout", headers={"Authorization": "Bearer expired"})

        assert response.status_code == 401
        assert response.json() == {"code": "bad_jwt", "message": "invalid JWT"}

    def test_missing_api_key(self, client, supabase, env):
        env.setenv("AUTH_SUPABASE_ANON_KEY", "")

        response = client.post("/auth/logout", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 500
        assert response.json()["code"] == "MISSING_API_KEY"
        assert supabase.requests == []


class TestMe:
    def test_missing_authorization(self, client, supabase):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "MISSING_AUTHORIZATION"
        assert supabase.requests == []

    def test_returns_user_record(self, client, supabase):
        supabase.on("GET", "/auth/v1/user", httpx.Response(200, json=USER))

        response = client.get("/auth/me", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 200
        assert response.json() == USER
        assert supabase.requests[0].headers["authorization"] == "Bearer token-1"

    def test_error_with_non_http_body_code_uses_response_status(self, client, supabase):
        supabase.on(
            "GET",
            "/auth/v1/user",
            httpx.Response(403, json={"code": "session_not_found", "error_description": "Session not found"}),
        )

        response = client.get("/auth/me", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 403
        assert response.json() == {"code": "SUPABASE_ERROR", "message": "Session not found"}

    def test_network_failure(self, client, supabase):
        supabase.on("GET", "/auth/v1/user", connect_error)

        response = client.get("/auth/me", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 500
        assert response.json() == {"code": "INTERNAL_ERROR", "message": "Internal server error"}

    def test_missing_api_key(self, client, supabase, env):
        env.setenv("AUTH_SUPABASE_ANON_KEY", "")

        response = client.get("/auth/me", headers={"Authorization": "Bearer token-1"})

        assert response.status_code == 500
        assert response.json() == {"code": "MISSING_API_KEY", "message": "Supabase API key not configured"}
        assert supabase.requests == []
