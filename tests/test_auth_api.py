"""
HTTP-level tests for /api/auth and the error translation layer.
"""

import asyncio

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from auth.dependencies import restrict_to
from main import create_app

JANE = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@example.com",
    "password": "SecurePass456!",
}


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestRegisterEndpoint:
    def test_register_returns_201_with_token_and_summary(self, client):
        res = client.post("/api/auth/register", json=JANE)
        assert res.status_code == 201, res.text
        body = res.json()
        assert body["status"] == "success"
        assert body["token"]
        user = body["data"]["user"]
        assert set(user) == {"_id", "firstName", "lastName", "email", "role"}
        assert user["firstName"] == "Jane"
        assert user["email"] == "jane@example.com"
        assert user["role"] == "user"
        assert "SecurePass456!" not in res.text

    def test_duplicate_registration_is_409(self, client):
        assert client.post("/api/auth/register", json=JANE).status_code == 201
        res = client.post("/api/auth/register", json=JANE)
        assert res.status_code == 409
        assert res.json() == {"status": "fail", "message": "User with this email already exists"}

    def test_missing_password_is_400(self, client):
        res = client.post("/api/auth/register", json={"email": "jane@example.com"})
        assert res.status_code == 400
        assert res.json()["message"] == "Please provide password"

    def test_malformed_json_is_400(self, client):
        res = client.post(
            "/api/auth/register",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json()["status"] == "fail"


class TestLoginEndpoint:
    def test_login_returns_same_user(self, client):
        registered = client.post("/api/auth/register", json=JANE).json()
        res = client.post(
            "/api/auth/login", json={"email": JANE["email"], "password": JANE["password"]}
        )
        assert res.status_code == 200, res.text
        body = res.json()
        assert body["status"] == "success"
        assert set(body["data"]["user"]) == {"_id", "email", "role"}
        assert body["data"]["user"]["_id"] == registered["data"]["user"]["_id"]

    def test_enumeration_resistance(self, client):
        client.post("/api/auth/register", json=JANE)
        wrong_password = client.post(
            "/api/auth/login", json={"email": JANE["email"], "password": "wrong"}
        )
        unknown_email = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "wrong"}
        )
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {
            "status": "fail",
            "message": "Incorrect email or password",
        }

    def test_missing_fields_is_400(self, client):
        res = client.post("/api/auth/login", json={})
        assert res.status_code == 400
        assert res.json()["message"] == "Please provide email and password"


class TestRouteProtection:
    def test_me_with_valid_token(self, client):
        token = client.post("/api/auth/register", json=JANE).json()["token"]
        res = client.get("/api/auth/me", headers=_bearer(token))
        assert res.status_code == 200
        assert res.json()["data"]["user"]["email"] == "jane@example.com"

    def test_missing_header(self, client):
        res = client.get("/api/auth/me")
        assert res.status_code == 401
        assert res.json()["message"] == "Not authorized to access this route"
        assert res.headers["WWW-Authenticate"] == "Bearer"

    def test_wrong_scheme_counts_as_missing(self, client):
        token = client.post("/api/auth/register", json=JANE).json()["token"]
        res = client.get("/api/auth/me", headers={"Authorization": f"Token {token}"})
        assert res.status_code == 401
        assert res.json()["message"] == "Not authorized to access this route"

    def test_invalid_token(self, client):
        res = client.get("/api/auth/me", headers=_bearer("not-a-real-token"))
        assert res.status_code == 401
        assert res.json()["message"] == "Token is invalid or has expired"


class TestRoleGate:
    @pytest.fixture
    def gated_client(self, settings):
        app = create_app(settings)

        @app.get("/api/admin/ping")
        async def admin_ping(user=Depends(restrict_to("admin"))):
            return {"status": "success", "role": user.role}

        with TestClient(app) as test_client:
            yield test_client

    def test_admin_allowed(self, gated_client):
        token = gated_client.post("/api/auth/register", json={**JANE, "role": "admin"}).json()["token"]
        res = gated_client.get("/api/admin/ping", headers=_bearer(token))
        assert res.status_code == 200
        assert res.json()["role"] == "admin"

    def test_user_forbidden(self, gated_client):
        token = gated_client.post("/api/auth/register", json=JANE).json()["token"]
        res = gated_client.get("/api/admin/ping", headers=_bearer(token))
        assert res.status_code == 403
        assert res.json()["message"] == "You do not have permission to perform this action"

    def test_gate_still_requires_token(self, gated_client):
        assert gated_client.get("/api/admin/ping").status_code == 401


class TestErrorTranslation:
    def test_unknown_route_is_404(self, client):
        res = client.get("/api/does-not-exist")
        assert res.status_code == 404
        assert res.json() == {"status": "fail", "message": "Route not found"}

    def test_missing_secret_is_500_without_details(self, make_settings):
        settings = make_settings(jwt_secret="")
        with TestClient(create_app(settings)) as test_client:
            res = test_client.post("/api/auth/register", json=JANE)
        assert res.status_code == 500
        assert res.json() == {"status": "error", "message": "An internal server error occurred"}

    def test_unexpected_exception_is_500(self, settings):
        app = create_app(settings)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("database password is hunter2")

        with TestClient(app) as test_client:
            res = test_client.get("/boom")
        assert res.status_code == 500
        assert res.json() == {"status": "error", "message": "An internal server error occurred"}
        assert "hunter2" not in res.text

    def test_development_mode_attaches_stack(self, make_settings):
        settings = make_settings(environment="development")
        app = create_app(settings)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app) as test_client:
            res = test_client.get("/boom")
        assert res.status_code == 500
        assert any("kaboom" in line for line in res.json()["stack"])

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestConcurrentRegistration:
    @pytest.mark.asyncio
    async def test_exactly_one_winner(self, settings):
        app = create_app(settings)
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                responses = await asyncio.gather(
                    http.post("/api/auth/register", json=JANE),
                    http.post("/api/auth/register", json=JANE),
                )
        assert sorted(r.status_code for r in responses) == [201, 409]
