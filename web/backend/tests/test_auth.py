"""Tests for auth API endpoints."""

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery"


class TestLogin:
    def test_login_returns_token_and_cookie(self, client, ctx):
        ctx.auth.create_user(ADMIN_EMAIL, ADMIN_PASSWORD, is_admin=True)

        response = client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["user"] == {
            "uid": data["user"]["uid"],
            "email": ADMIN_EMAIL,
            "is_admin": True,
        }
        assert response.cookies.get("mezmurhub_session") == data["token"]

    def test_cookie_session_is_accepted(self, client, ctx):
        ctx.auth.create_user(ADMIN_EMAIL, ADMIN_PASSWORD)
        client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )

        # TestClient keeps the cookie from the login response
        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["email"] == ADMIN_EMAIL

    def test_wrong_password(self, client, ctx):
        ctx.auth.create_user(ADMIN_EMAIL, ADMIN_PASSWORD)

        response = client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


class TestSession:
    def test_me(self, auth_client):
        response = auth_client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["email"] == ADMIN_EMAIL

    def test_logout_invalidates_token(self, auth_client):
        assert auth_client.post("/api/auth/logout").json() == {"success": True}
        assert auth_client.get("/api/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401
