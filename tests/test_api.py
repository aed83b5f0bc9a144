"""End-to-end tests of the HTTP API through FastAPI's TestClient.

Every test runs twice: once with Redis-backed sessions and candle cache,
once with SQL-only sessions and no cache.
"""

from datetime import datetime

import pytest

from stock_backend.dependencies import get_logo_service
from stock_backend.main import app
from stock_backend.models.candle import Candle
from stock_backend.models.symbol import Symbol
from stock_backend.services.logo_service import LogoDetectionService
from stock_backend.services.vision_client import DetectedLogo

EMAIL = "carol@example.com"
PASSWORD = "very-secret-pw"


def signup_and_login(client, email=EMAIL, password=PASSWORD):
    assert client.post("/v1/signup", json={"email": email, "password": password}).status_code == 201
    response = client.post("/v1/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


def bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


class StaticDetector:
    def detect_logos(self, image_data):
        return [DetectedLogo(name="Sony", confidence=0.91)]


class StaticAnalyzer:
    def analyze(self, prompt):
        return "brand strength"


class TestHealth:
    """Unversioned liveness check."""

    def test_get(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers["cache-control"] == "no-store"

    def test_head(self, client):
        response = client.head("/healthz")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"

    def test_options(self, client):
        assert client.options("/healthz").status_code == 204


class TestAuthEndpoints:
    """Signup, login, refresh and logout flows."""

    def test_signup_login_refresh_logout(self, client):
        tokens = signup_and_login(client)
        assert tokens["token_type"] == "Bearer"
        assert tokens["expires_in"] == 900

        refreshed = client.post("/v1/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refreshed.status_code == 200
        new_tokens = refreshed.json()
        assert new_tokens["refresh_token"] != tokens["refresh_token"]

        # The rotated token cannot be used again
        replay = client.post("/v1/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert replay.status_code == 401

        logout = client.post("/v1/logout", json={"refresh_token": new_tokens["refresh_token"]})
        assert logout.status_code == 200
        assert logout.json() == {"message": "logged out"}

        after_logout = client.post("/v1/refresh", json={"refresh_token": new_tokens["refresh_token"]})
        assert after_logout.status_code == 401

    def test_duplicate_signup_is_conflict(self, client):
        signup_and_login(client)

        response = client.post("/v1/signup", json={"email": EMAIL, "password": PASSWORD})

        assert response.status_code == 409
        assert response.json() == {"detail": "signup failed"}

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": PASSWORD},
            {"email": EMAIL, "password": "short"},
            {"email": EMAIL},
        ],
    )
    def test_invalid_signup_body(self, client, body):
        response = client.post("/v1/signup", json=body)

        assert response.status_code == 400
        assert response.json() == {"detail": "invalid request"}

    def test_signup_with_overlong_password_is_conflict(self, client):
        response = client.post("/v1/signup", json={"email": EMAIL, "password": "x" * 100})

        assert response.status_code == 409
        assert response.json() == {"detail": "signup failed"}

    def test_login_failures_look_the_same(self, client):
        signup_and_login(client)

        wrong_password = client.post("/v1/login", json={"email": EMAIL, "password": "wrong-password"})
        unknown_email = client.post("/v1/login", json={"email": "x@example.com", "password": PASSWORD})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()

    def test_logout_unknown_token_still_succeeds(self, client):
        response = client.post("/v1/logout", json={"refresh_token": "0" * 64})

        assert response.status_code == 200

    def test_logout_all(self, client):
        first = signup_and_login(client)
        second = client.post("/v1/login", json={"email": EMAIL, "password": PASSWORD}).json()

        response = client.post("/v1/logout-all", headers=bearer(second))

        assert response.status_code == 200
        for tokens in (first, second):
            assert client.post("/v1/refresh", json={"refresh_token": tokens["refresh_token"]}).status_code == 401

    def test_logout_all_requires_token(self, client):
        assert client.post("/v1/logout-all").status_code == 401


class TestCandleEndpoints:
    """Authenticated candle and symbol reads."""

    @pytest.fixture
    def seeded(self, db):
        db.add_all(
            [
                Candle(symbol="AAPL", interval="1day", time=datetime(2024, 1, day), open=1.0, high=2.0, low=0.5, close=1.5, volume=day)
                for day in range(1, 6)
            ]
        )
        db.add(Symbol(code="AAPL", name="Apple Inc.", market="NASDAQ", sort_key=1))
        db.commit()

    def test_candles_newest_first(self, client, seeded):
        tokens = signup_and_login(client)

        response = client.get("/v1/candles/AAPL", params={"outputsize": 3}, headers=bearer(tokens))

        assert response.status_code == 200
        body = response.json()
        assert [c["time"] for c in body] == ["2024-01-05", "2024-01-04", "2024-01-03"]
        assert body[0]["volume"] == 5

    def test_repeated_reads_agree(self, client, seeded):
        tokens = signup_and_login(client)

        first = client.get("/v1/candles/AAPL", headers=bearer(tokens)).json()
        second = client.get("/v1/candles/AAPL", headers=bearer(tokens)).json()

        assert first == second
        assert len(first) == 5

    def test_unknown_symbol_is_empty(self, client, seeded):
        tokens = signup_and_login(client)

        response = client.get("/v1/candles/NOPE", headers=bearer(tokens))

        assert response.status_code == 200
        assert response.json() == []

    def test_candles_require_authentication(self, client, seeded):
        assert client.get("/v1/candles/AAPL").status_code == 401
        invalid = client.get("/v1/candles/AAPL", headers={"Authorization": "Bearer garbage"})
        assert invalid.status_code == 401

    def test_symbols(self, client, seeded):
        tokens = signup_and_login(client)

        response = client.get("/v1/symbols", headers=bearer(tokens))

        assert response.status_code == 200
        assert [s["code"] for s in response.json()] == ["AAPL"]


class TestLogoEndpoints:
    """Logo detection and company analysis with stubbed clients."""

    @pytest.fixture
    def logo_client(self, client):
        app.dependency_overrides[get_logo_service] = lambda: LogoDetectionService(StaticDetector(), StaticAnalyzer())
        return client

    def test_detect(self, logo_client):
        tokens = signup_and_login(logo_client)

        response = logo_client.post(
            "/v1/logo/detect",
            files={"image": ("logo.png", b"\x89PNG fake", "image/png")},
            headers=bearer(tokens),
        )

        assert response.status_code == 200
        assert response.json() == [{"name": "Sony", "confidence": 0.91}]

    def test_detect_empty_image(self, logo_client):
        tokens = signup_and_login(logo_client)

        response = logo_client.post(
            "/v1/logo/detect",
            files={"image": ("logo.png", b"", "image/png")},
            headers=bearer(tokens),
        )

        assert response.status_code == 400

    def test_analyze(self, logo_client):
        tokens = signup_and_login(logo_client)

        response = logo_client.post("/v1/logo/analyze", json={"company_name": "ソニー"}, headers=bearer(tokens))

        assert response.status_code == 200
        assert response.json() == {"company_name": "ソニー", "summary": "brand strength"}

    def test_analyze_invalid_name(self, logo_client):
        tokens = signup_and_login(logo_client)

        response = logo_client.post("/v1/logo/analyze", json={"company_name": "<b>Sony</b>"}, headers=bearer(tokens))

        assert response.status_code == 400
