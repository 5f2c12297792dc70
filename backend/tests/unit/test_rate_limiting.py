"""Tests for rate limiting behavior.

Security: login and registration are throttled per client IP.
"""

import json
from unittest.mock import MagicMock

import pytest
from starlette.requests import Request as StarletteRequest

from ticketdesk.core.config import settings
from ticketdesk.core.rate_limiting import (
    _rate_limit_key_func,
    limiter,
    rate_limit_exceeded_handler,
)
from tests.conftest import ALICE_EMAIL


def _request(path: str = "/login") -> StarletteRequest:
    scope = {
        "type": "http",
        "method": "POST",
        "path": path,
        "headers": [],
        "client": ("203.0.113.7", 50000),
    }
    return StarletteRequest(scope)


class TestRateLimitKey:
    """Tests for the limiter key function."""

    def test_key_is_client_ip(self):
        assert _rate_limit_key_func(_request()) == "ip:203.0.113.7"


class TestRateLimitExceededHandler:
    """Tests for rate limit exceeded response format."""

    def test_returns_429_with_error_body(self):
        exc = MagicMock()
        exc.detail = "5 per 1 minute"

        response = rate_limit_exceeded_handler(_request(), exc)
        body = json.loads(response.body.decode())

        assert response.status_code == 429
        assert body["code"] == "RATE_LIMITED"
        assert "Rate limit exceeded" in body["error"]

    def test_retry_after_fallback_on_invalid_detail(self):
        """Retry-After should fall back to 60 if parsing fails."""
        exc = MagicMock()
        exc.detail = "not a number"

        response = rate_limit_exceeded_handler(_request(), exc)

        assert response.headers["Retry-After"] == "60"


class TestLoginThrottling:
    """Tests that the limiter is wired to the login endpoint."""

    @pytest.fixture
    def enabled_limiter(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_login", "2/minute")
        limiter.reset()
        limiter.enabled = True
        yield limiter
        limiter.reset()

    @pytest.mark.asyncio
    async def test_third_login_in_a_minute_is_429(self, client, enabled_limiter):
        credentials = {"email": ALICE_EMAIL, "password": "wrong-password"}

        first = await client.post("/login", json=credentials)
        second = await client.post("/login", json=credentials)
        third = await client.post("/login", json=credentials)

        assert (first.status_code, second.status_code) == (401, 401)
        assert third.status_code == 429
        assert third.json()["code"] == "RATE_LIMITED"
        assert "Retry-After" in third.headers
