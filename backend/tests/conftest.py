"""Shared fixtures for ticketdesk tests.

Every test gets a fresh in-memory record store and a controllable clock.
API tests run the real application through httpx's ASGI transport with
get_record_store and get_clock overridden.
"""

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ticketdesk.services.auth_service import AuthService
from ticketdesk.services.ticket_service import TicketService
from ticketdesk.storage import MemoryRecordStore, reset_record_store

# Fixed starting point for the test clock
BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

# Test credentials
# Security: test-only passwords, never used outside the suite
ALICE_EMAIL = "alice@example.com"
ALICE_PASSWORD = "alice-pass-123"  # nosec B105
BOB_EMAIL = "bob@example.com"
BOB_PASSWORD = "bob-pass-123"  # nosec B105


class FrozenClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta(**kwargs) and return the new time."""
        self.now = self.now + timedelta(**kwargs)
        return self.now


def auth_headers(token: str) -> dict[str, str]:
    """Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(
    client: AsyncClient,
    email: str = ALICE_EMAIL,
    password: str = ALICE_PASSWORD,
    name: str = "Alice",
) -> str:
    """Create a user through the API and return a fresh bearer token."""
    response = await client.post(
        "/users", json={"email": email, "password": password, "name": name}
    )
    assert response.status_code == 201, response.text
    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


# =============================================================================
# Store and Service Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FrozenClock:
    """Controllable clock starting at BASE_TIME."""
    return FrozenClock()


@pytest.fixture
def store() -> MemoryRecordStore:
    """Empty in-memory record store."""
    return MemoryRecordStore()


@pytest.fixture
def auth_service(store: MemoryRecordStore, clock: FrozenClock) -> AuthService:
    return AuthService(store, clock=clock)


@pytest.fixture
def ticket_service(store: MemoryRecordStore, clock: FrozenClock) -> TicketService:
    return TicketService(store, clock=clock)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(
    store: MemoryRecordStore, clock: FrozenClock
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, backed by the test store and clock.

    Yields:
        AsyncClient without credentials; tests log in as needed.
    """
    from ticketdesk.api.deps import get_clock
    from ticketdesk.main import app
    from ticketdesk.storage import get_record_store

    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def alice_token(client: AsyncClient) -> str:
    """Bearer token for a registered user Alice."""
    return await register_and_login(client)


@pytest_asyncio.fixture
async def bob_token(client: AsyncClient) -> str:
    """Bearer token for a second registered user Bob."""
    return await register_and_login(client, BOB_EMAIL, BOB_PASSWORD, "Bob")


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_store_singleton() -> Iterator[None]:
    """Reset the record store singleton before and after each test."""
    reset_record_store()
    yield
    reset_record_store()


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Security: Rate limiting is tested separately; disable for other tests
    to avoid flaky failures from rate limit triggers.

    Yields:
        None (autouse fixture).
    """
    from ticketdesk.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    limiter.enabled = original_enabled
