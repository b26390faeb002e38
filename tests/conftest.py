"""
Pytest configuration and fixtures for the Collector Membership Service.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.core.cache import QueryCache
from app.core.config import get_settings
from app.core.dependencies import get_data_store, get_query_cache
from app.core.retry import RetryConfig
from app.database.base import AuthUser
from app.database.memory_store import InMemoryStore
from app.main import app
from app.services.directory_service import DirectoryService
from app.services.identity_service import IdentityService
from app.services.payment_request_service import PaymentRequestService
from app.services.summary_service import SummaryService

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

ADMIN_TOKEN = "admin-token"
COLLECTOR_TOKEN = "smith-token"
MEMBER_TOKEN = "member-token"
ORPHAN_COLLECTOR_TOKEN = "orphan-token"


def _member(member_id, full_name, member_number, collector, minutes):
    return {
        "id": member_id,
        "full_name": full_name,
        "member_number": member_number,
        "collector": collector,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }


def build_seeded_store() -> InMemoryStore:
    """Directory of two collectors plus a handful of payment requests."""
    members = [
        _member("m-jane", "Jane Doe", "A100", "Smith", 10),
        _member("m-bob", "Bob Lee", "A101", "Jones", 20),
        _member("m-ann", "Ann Smithers", "A102", "Smith", 30),
        _member("m-raj", "Raj Patel", "B042", "Smith", 40),
        _member("m-zoe", "Zoe Kim", "A104", "Jones", 50),
        _member("m-tie-b", "Tie Bravo", "A106", "Smith", 60),
        _member("m-tie-a", "Tie Alpha", "A105", "Smith", 60),
        _member("m-pct", "Percy 100%", "A107", None, 70),
    ]
    collectors = [
        {"id": "c-smith", "name": "Smith", "member_number": "C001"},
        {"id": "c-jones", "name": "Jones", "member_number": "C002"},
    ]
    user_roles = [
        {"user_id": "U1", "role": "admin"},
        {"user_id": "U1", "role": "member"},
        {"user_id": "U2", "role": "collector"},
        {"user_id": "U4", "role": "collector"},
    ]
    payment_requests = [
        {
            "id": "pr-jane-yearly",
            "member_id": "m-jane",
            "collector_id": "c-smith",
            "payment_type": "yearly",
            "amount": Decimal("50.00"),
            "status": "pending",
            "created_at": BASE_TIME + timedelta(days=3),
            "approved_at": None,
            "approved_by": None,
        },
        {
            "id": "pr-ann-membership",
            "member_id": "m-ann",
            "collector_id": "c-smith",
            "payment_type": "membership",
            "amount": Decimal("25.50"),
            "status": "approved",
            "created_at": BASE_TIME + timedelta(days=1),
            "approved_at": BASE_TIME + timedelta(days=2),
            "approved_by": "U1",
        },
        {
            "id": "pr-raj-other",
            "member_id": "m-raj",
            "collector_id": "c-smith",
            "payment_type": "other",
            "amount": Decimal("10.00"),
            "status": "rejected",
            "created_at": BASE_TIME + timedelta(days=2),
            "approved_at": None,
            "approved_by": "U1",
        },
        {
            "id": "pr-bob-yearly",
            "member_id": "m-bob",
            "collector_id": "c-jones",
            "payment_type": "yearly",
            "amount": Decimal("40.00"),
            "status": "pending",
            "created_at": BASE_TIME + timedelta(days=4),
            "approved_at": None,
            "approved_by": None,
        },
    ]
    users = {
        ADMIN_TOKEN: AuthUser(id="U1", email="admin@example.org"),
        COLLECTOR_TOKEN: AuthUser(id="U2", email="smith@example.org", member_number="C001"),
        MEMBER_TOKEN: AuthUser(id="U3", email="jane@example.org", member_number="A100"),
        ORPHAN_COLLECTOR_TOKEN: AuthUser(id="U4", email="orphan@example.org", member_number="C999"),
    }
    return InMemoryStore(
        tables={
            "members": members,
            "members_collectors": collectors,
            "user_roles": user_roles,
            "payment_requests": payment_requests,
        },
        users=users,
    )


@pytest.fixture
def store() -> InMemoryStore:
    """Seeded in-memory store."""
    return build_seeded_store()


@pytest.fixture
def cache() -> QueryCache:
    """Fresh query cache."""
    return QueryCache(max_entries=128)


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Retry policy without backoff delays."""
    return RetryConfig(max_attempts=3, base_delay=0, max_delay=0)


@pytest.fixture
def directory_service(store, cache, fast_retry) -> DirectoryService:
    return DirectoryService(store=store, cache=cache, retry_config=fast_retry)


@pytest.fixture
def identity_service(store, cache, fast_retry) -> IdentityService:
    return IdentityService(store=store, cache=cache, retry_config=fast_retry)


@pytest.fixture
def payment_service(store, cache, fast_retry) -> PaymentRequestService:
    return PaymentRequestService(store=store, cache=cache, retry_config=fast_retry)


@pytest.fixture
def summary_service(directory_service, payment_service, cache) -> SummaryService:
    return SummaryService(directory=directory_service, payments=payment_service, cache=cache)


@pytest.fixture
def client(store, cache) -> Generator[TestClient, None, None]:
    """
    Test client wired to the seeded store.

    Every request goes through real identity resolution using the seeded
    session tokens.
    """
    app.dependency_overrides[get_data_store] = lambda: store
    app.dependency_overrides[get_query_cache] = lambda: cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    return _bearer(ADMIN_TOKEN)


@pytest.fixture
def collector_headers() -> dict:
    """Headers for the Smith collector."""
    return _bearer(COLLECTOR_TOKEN)


@pytest.fixture
def member_headers() -> dict:
    return _bearer(MEMBER_TOKEN)


@pytest.fixture
def orphan_collector_headers() -> dict:
    """Headers for a collector whose member number matches no collector record."""
    return _bearer(ORPHAN_COLLECTOR_TOKEN)


@pytest.fixture
def sample_headers() -> dict:
    """Sample request headers with a fixed correlation ID."""
    return {**_bearer(ADMIN_TOKEN), "X-Correlation-ID": "test-corr-123"}


@pytest.fixture
def api_prefix() -> str:
    """Get the API prefix from settings."""
    return get_settings().api_prefix
