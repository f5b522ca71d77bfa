"""
API tests for token authentication and the auth bridge.
"""

from datetime import timedelta

from faaxis.core.config import settings
from faaxis.services.token_service import TokenAuthenticator

from conftest import USER_PASSWORD

CREDENTIALS = { "username": "alice@example.com", "password": USER_PASSWORD }


def _bearer(token: str) -> dict:
    return { "Authorization": f"Bearer {token}" }


# ======================================================================
# Login / register
# ======================================================================


class TestTokenLogin:
    def test_login_returns_token_and_cookie(self, client, user_factory):
        user_factory()
        response = client.post("/api/jwt/login", json=CREDENTIALS)

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["username"] == "alice@example.com"
        assert body["token"]
        assert response.cookies.get(settings.TOKEN_COOKIE_NAME) == body["token"]

    def test_register(self, client):
        response = client.post("/api/jwt/register", json=CREDENTIALS)
        assert response.status_code == 201
        assert response.json()["token"]

    def test_bad_credentials(self, client):
        assert client.post("/api/jwt/login", json=CREDENTIALS).status_code == 401


# ======================================================================
# Token-protected user endpoint
# ======================================================================


class TestTokenUser:
    def test_bearer_header(self, client, user_factory):
        user_factory()
        token = client.post("/api/jwt/login", json=CREDENTIALS).json()["token"]
        client.cookies.clear()

        response = client.get("/api/jwt/user", headers=_bearer(token))
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice@example.com"

    def test_cookie(self, client, user_factory):
        user_factory()
        client.post("/api/jwt/login", json=CREDENTIALS)
        assert client.get("/api/jwt/user").status_code == 200

    def test_missing_token(self, client):
        response = client.get("/api/jwt/user")
        assert response.status_code == 401
        assert response.json() == { "message": "Authentication required" }

    def test_garbage_token(self, client):
        response = client.get("/api/jwt/user", headers=_bearer("not-a-token"))
        assert response.status_code == 401
        assert response.json() == { "message": "Invalid token" }

    def test_expired_token(self, client, user_factory):
        token = TokenAuthenticator.issue(user_factory(), expires_delta=timedelta(seconds=-5))
        response = client.get("/api/jwt/user", headers=_bearer(token))
        assert response.status_code == 401
        assert response.json() == { "message": "Token has expired" }

    def test_logout_clears_cookie(self, client, user_factory):
        user_factory()
        client.post("/api/jwt/login", json=CREDENTIALS)
        assert client.post("/api/jwt/logout").status_code == 200
        assert client.get("/api/jwt/user").status_code == 401


# ======================================================================
# Auth bridge
# ======================================================================


class TestAuthBridge:
    def test_bridge_from_session(self, client):
        session_body = client.post("/api/register", json=CREDENTIALS).json()

        response = client.get("/api/jwt/auth-bridge")
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == session_body["user"]["id"]

        me = client.get("/api/jwt/user", headers=_bearer(body["token"]))
        assert me.json()["user"]["id"] == session_body["user"]["id"]

    def test_bridge_without_session(self, client):
        response = client.get("/api/jwt/auth-bridge")
        assert response.status_code == 401
        assert response.json() == { "message": "Not authenticated with session" }
