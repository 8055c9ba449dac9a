"""
DiscoverHealth Backend — HTTP API Tests
=========================================

What:  Drives the full app (middleware, routes, services, SQLite) over HTTP.
How:   httpx AsyncClient + ASGITransport; the client's cookie jar plays the
       role of the browser.

What we test:
    ✅ The signup → login → create → search → recommend → logout journey
    ✅ A cookie from a logged-out session is refused (401)
    ✅ Login gate on every mutating resource route, and where it sits
       relative to JSON decoding and body type checks
    ✅ Error bodies: status, code, field, request ID
    ✅ Session status endpoint and cookie handling
    ✅ Rate limiting
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from discoverhealth.main import create_app
from discoverhealth.models import Review

COOKIE = "discoverhealth.sid"


class TestJourney:

    @pytest.mark.asyncio
    async def test_end_to_end(self, test_client, clinic_payload):
        response = await test_client.post(
            "/api/users/signup", json={"username": "alice", "password": "longpassword1"}
        )
        assert response.status_code == 201
        assert response.json()["message"] == "User created successfully"

        response = await test_client.post(
            "/api/users/login", json={"username": "alice", "password": "longpassword1"}
        )
        assert response.status_code == 200
        assert response.json() == {"username": "alice", "message": "Login successful"}
        set_cookie = response.headers["set-cookie"]
        assert COOKIE in set_cookie
        assert "httponly" in set_cookie.lower()
        assert "samesite=strict" in set_cookie.lower()

        response = await test_client.post("/api/resources", json=clinic_payload)
        assert response.status_code == 201
        resource_id = response.json()["id"]

        response = await test_client.get("/api/resources/Southampton")
        assert response.status_code == 200
        (resource,) = response.json()
        assert resource["id"] == resource_id
        assert resource["name"] == "Clinic A"
        assert resource["recommendations"] == 0

        response = await test_client.post(f"/api/resources/{resource_id}/recommend")
        assert response.status_code == 200
        assert response.json() == {"message": "Recommendation added"}

        response = await test_client.get("/api/resources/Southampton")
        assert response.json()[0]["recommendations"] == 1

        stale = test_client.cookies.get(COOKIE)
        response = await test_client.post("/api/users/logout")
        assert response.status_code == 200
        assert test_client.cookies.get(COOKIE) is None

        response = await test_client.post(
            "/api/resources",
            json=clinic_payload,
            headers={"Cookie": f"{COOKIE}={stale}"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"

        response = await test_client.get("/api/resources/Southampton")
        assert len(response.json()) == 1


class TestUsers:

    @pytest.mark.asyncio
    async def test_duplicate_signup(self, test_client):
        body = {"username": "alice", "password": "longpassword1"}
        assert (await test_client.post("/api/users/signup", json=body)).status_code == 201

        response = await test_client.post("/api/users/signup", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "conflict"
        assert data["message"] == "Username already exists"

    @pytest.mark.asyncio
    async def test_signup_validation(self, test_client):
        response = await test_client.post(
            "/api/users/signup", json={"username": "alice smith", "password": "longpassword1"}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert data["message"] == "Invalid or missing username"
        assert data["details"] == {"field": "username"}
        assert data["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_signup_short_password(self, test_client):
        response = await test_client.post(
            "/api/users/signup", json={"username": "alice", "password": "short"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 8 characters"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client, login):
        await login(test_client)
        await test_client.post("/api/users/logout")

        response = await test_client.post(
            "/api/users/login", json={"username": "alice", "password": "wrongpassword"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_failed"
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, test_client):
        response = await test_client.post(
            "/api/users/login", json={"username": "nobody", "password": "longpassword1"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_status_anonymous(self, test_client):
        response = await test_client.get("/api/users/user")
        assert response.status_code == 200
        assert response.json() == {"loggedIn": False}

    @pytest.mark.asyncio
    async def test_status_logged_in_renews_cookie(self, test_client, login):
        await login(test_client)

        response = await test_client.get("/api/users/user")

        assert response.json() == {"loggedIn": True, "username": "alice"}
        assert COOKIE in response.headers["set-cookie"]

    @pytest.mark.asyncio
    async def test_logout_without_session(self, test_client):
        response = await test_client.post("/api/users/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Logout successful"}

    @pytest.mark.asyncio
    async def test_tampered_cookie_is_anonymous_and_cleared(self, test_client):
        response = await test_client.get(
            "/api/users/user", headers={"Cookie": f"{COOKIE}=forged.signature"}
        )
        assert response.json() == {"loggedIn": False}
        assert f'{COOKIE}=""' in response.headers["set-cookie"]


class TestResources:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("POST", "/api/resources", {"name": "Clinic A"}),
            ("POST", "/api/resources/1/recommend", None),
            ("POST", "/api/resources/1/reviews", {"review": "Great"}),
        ],
    )
    async def test_mutations_require_login(self, test_client, method, path, body):
        response = await test_client.request(method, path, json=body)
        assert response.status_code == 401
        assert response.json()["message"] == "You must be logged in to perform this action"

    @pytest.mark.asyncio
    async def test_create_invalid_latitude_persists_nothing(self, test_client, login, clinic_payload):
        await login(test_client)

        response = await test_client.post("/api/resources", json={**clinic_payload, "lat": 91})

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "lat"}
        assert (await test_client.get("/api/resources/Southampton")).json() == []

    @pytest.mark.asyncio
    async def test_create_missing_field(self, test_client, login, clinic_payload):
        await login(test_client)
        payload = {k: v for k, v in clinic_payload.items() if k != "country"}

        response = await test_client.post("/api/resources", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == "Country is required"

    @pytest.mark.asyncio
    async def test_create_wrong_type(self, test_client, login, clinic_payload):
        await login(test_client)

        response = await test_client.post("/api/resources", json={**clinic_payload, "lon": "west"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert data["details"] == {"field": "lon"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field, value", [("lat", True), ("lon", False), ("lon", "0")])
    async def test_non_numeric_coordinate_rejected(
        self, test_client, login, clinic_payload, field, value
    ):
        await login(test_client)

        response = await test_client.post("/api/resources", json={**clinic_payload, field: value})

        assert response.status_code == 400
        assert response.json()["details"] == {"field": field}
        assert (await test_client.get("/api/resources/Southampton")).json() == []

    @pytest.mark.asyncio
    async def test_integer_coordinates_accepted(self, test_client, login, clinic_payload):
        await login(test_client)

        response = await test_client.post(
            "/api/resources", json={**clinic_payload, "lat": 51, "lon": 0}
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_malformed_json_has_null_details(self, test_client, login):
        await login(test_client)

        response = await test_client.post(
            "/api/resources",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert data["details"] is None

    @pytest.mark.asyncio
    async def test_login_gate_order_for_anonymous_bodies(self, test_client):
        undecodable = await test_client.post(
            "/api/resources",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        wrong_types = await test_client.post("/api/resources", json={"lat": "north"})

        assert undecodable.status_code == 400
        assert wrong_types.status_code == 401

    @pytest.mark.asyncio
    async def test_search_unknown_region_is_empty(self, test_client):
        response = await test_client.get("/api/resources/Atlantis")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_search_invalid_region(self, test_client):
        response = await test_client.get("/api/resources/Bad!Region")
        assert response.status_code == 400
        assert response.json()["details"] == {"field": "region"}

    @pytest.mark.asyncio
    async def test_description_is_escaped(self, test_client, login, clinic_payload):
        await login(test_client)
        await test_client.post(
            "/api/resources",
            json={**clinic_payload, "description": "<script>alert(1)</script>"},
        )

        (resource,) = (await test_client.get("/api/resources/Southampton")).json()

        assert resource["description"] == "&lt;script&gt;alert(1)&lt;/script&gt;"

    @pytest.mark.asyncio
    async def test_recommend_missing_resource(self, test_client, login):
        await login(test_client)
        response = await test_client.post("/api/resources/9999/recommend")
        assert response.status_code == 404
        assert response.json()["message"] == "Resource not found"

    @pytest.mark.asyncio
    async def test_non_integer_id(self, test_client, login):
        await login(test_client)
        response = await test_client.post("/api/resources/abc/recommend")
        assert response.status_code == 400
        assert response.json()["details"] == {"field": "resource_id"}


class TestReviews:

    @pytest.mark.asyncio
    async def test_review_lifecycle(self, test_client, login, clinic_payload, database):
        await login(test_client)
        resource_id = (await test_client.post("/api/resources", json=clinic_payload)).json()["id"]

        response = await test_client.post(
            f"/api/resources/{resource_id}/reviews", json={"review": "  Kind <b>staff</b> "}
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Review added successfully"
        async with database.session() as session:
            review = await session.get(Review, response.json()["id"])
        assert review.review == "Kind &lt;b&gt;staff&lt;/b&gt;"

    @pytest.mark.asyncio
    async def test_blank_review(self, test_client, login, clinic_payload):
        await login(test_client)
        resource_id = (await test_client.post("/api/resources", json=clinic_payload)).json()["id"]

        response = await test_client.post(
            f"/api/resources/{resource_id}/reviews", json={"review": "   "}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Review cannot be empty"

    @pytest.mark.asyncio
    async def test_review_missing_resource(self, test_client, login, database):
        await login(test_client)

        response = await test_client.post("/api/resources/9999/reviews", json={"review": "Great"})

        assert response.status_code == 404
        async with database.session() as session:
            assert (await session.execute(select(Review))).first() is None


class TestPlatform:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get(
            "/api/users/user", headers={"X-Request-ID": "trace-123"}
        )
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_rate_limit(self, test_settings, database):
        limited = create_app(
            settings=test_settings.model_copy(update={"rate_limit_requests": 10}),
            database=database,
        )
        transport = ASGITransport(app=limited)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(10):
                assert (await client.get("/api/users/user")).status_code == 200
            response = await client.get("/api/users/user")

        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"
        assert int(response.headers["Retry-After"]) > 0
