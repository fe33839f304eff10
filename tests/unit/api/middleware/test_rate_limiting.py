"""Test rate limiting middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from voicegate.api.middleware.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimitMiddleware,
)


@pytest.fixture
def limiter(clock):
    """Limiter allowing three requests per minute."""
    return InMemoryRateLimiter(RateLimitConfig(requests_per_minute=3), clock=clock)


class TestInMemoryRateLimiter:
    """Test sliding window."""

    def test_should_allow_within_limit(self, limiter):
        """Test requests under the limit."""
        for _ in range(3):
            assert limiter.is_allowed("client")[0] is True
        assert limiter.remaining("client") == 0

    def test_should_block_over_limit(self, limiter, clock):
        """Test fourth request in window."""
        for _ in range(3):
            limiter.is_allowed("client")
        clock.advance(20)

        allowed, retry_after = limiter.is_allowed("client")

        assert allowed is False
        assert retry_after == 40

    def test_window_slides(self, limiter, clock):
        """Test old requests leave the window."""
        for _ in range(3):
            limiter.is_allowed("client")
        clock.advance(60)

        assert limiter.is_allowed("client")[0] is True

    def test_clients_are_independent(self, limiter):
        """Test per-client windows."""
        for _ in range(3):
            limiter.is_allowed("a")

        assert limiter.is_allowed("b")[0] is True

    def test_disabled_allows_everything(self, clock):
        """Test disabled limiter."""
        limiter = InMemoryRateLimiter(
            RateLimitConfig(requests_per_minute=1, enabled=False), clock=clock
        )
        for _ in range(5):
            assert limiter.is_allowed("client") == (True, 0)

    def test_cleanup_forgets_idle_clients(self, limiter, clock):
        """Test cleanup."""
        limiter.is_allowed("a")
        clock.advance(61)
        limiter.is_allowed("b")

        assert limiter.cleanup() == 1
        assert limiter.remaining("b") == 2


class TestRateLimitMiddleware:
    """Test HTTP behaviour."""

    @pytest.fixture
    def client(self, limiter):
        """App with one limited and one excluded route."""
        config = RateLimitConfig(requests_per_minute=3)
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, rate_limiter=limiter, config=config)

        @app.get("/api/chat")
        async def chat():
            return {"ok": True}

        @app.get("/api/health")
        async def health():
            return {"ok": True}

        return TestClient(app)

    def test_should_add_headers(self, client):
        """Test rate limit headers."""
        response = client.get("/api/chat")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "3"
        assert response.headers["X-RateLimit-Remaining"] == "2"

    def test_should_return_429_with_retry_after(self, client):
        """Test limit exceeded."""
        for _ in range(3):
            client.get("/api/chat")

        response = client.get("/api/chat")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"

    def test_excluded_path_is_not_limited(self, client):
        """Test health is never limited."""
        for _ in range(5):
            assert client.get("/api/health").status_code == 200

    def test_forwarded_for_identifies_client(self, client):
        """Test X-Forwarded-For keying."""
        for _ in range(3):
            client.get("/api/chat", headers={"X-Forwarded-For": "10.0.0.1"})

        response = client.get("/api/chat", headers={"X-Forwarded-For": "10.0.0.2"})

        assert response.status_code == 200
