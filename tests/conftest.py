# Storefront Test Suite - Shared Configuration and Fixtures
#
# This module provides:
# - A fake REST API (Flask app in tests/fake_api.py) served in-process
# - Storefront instances wired to it through an httpx transport
# - Seeded accounts and comments
# - Failure message formatting

from typing import Any, Dict, Optional

import pytest

from storefront import create_storefront
from storefront.config import Config
from storefront.storage import ADMIN_TOKEN_KEY, MemoryStore

from tests.fake_api import FakeBackend, FlaskTransport, create_fake_api, make_comment


CUSTOMER_EMAIL = "sara@example.com"
ADMIN_EMAIL = "admin@example.com"


# =============================================================================
# FAILURE MESSAGE HELPER
# =============================================================================

class TestFailure(Exception):
    """
    Assertion error with a human-readable breakdown.

    Structure:
    1. Scenario: What was being tested
    2. Expected: What should have happened
    3. Actual: What actually happened
    4. Code Location: Where to look in the codebase
    """
    __test__ = False

    def __init__(
        self,
        scenario: str,
        expected: str,
        actual: str,
        code_location: str,
        extra_context: Optional[Dict[str, Any]] = None
    ):
        self.scenario = scenario
        self.expected = expected
        self.actual = actual
        self.code_location = code_location
        self.extra_context = extra_context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [
            "",
            "=" * 80,
            "TEST FAILURE DETAILS",
            "=" * 80,
            f"SCENARIO: {self.scenario}",
            "-" * 80,
            f"EXPECTED: {self.expected}",
            f"ACTUAL: {self.actual}",
            f"CODE LOCATION: {self.code_location}",
        ]

        if self.extra_context:
            lines.append("-" * 80)
            lines.append("EXTRA CONTEXT:")
            for key, value in self.extra_context.items():
                lines.append(f"  {key}: {value}")

        lines.append("=" * 80)
        return "\n".join(lines)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_config(tmp_path):
    return Config.from_mapping({
        "API_BASE_URL": "http://testserver/api",
        "DOWNLOAD_DIR": str(tmp_path / "downloads"),
        "COMMENTS_CLIENT_FILTERING": True,
    })


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def backend() -> FakeBackend:
    """Fake server state: one customer, one admin, five comments."""
    backend = FakeBackend()
    backend.add_account(CUSTOMER_EMAIL)
    backend.add_account(ADMIN_EMAIL, is_admin=True, firstName="مدیر", lastName="سایت")
    backend.comments = [
        make_comment("c1", status="pending", content="ارسال سریع بود", likes=3,
                     created_at="2024-05-01T10:00:00Z"),
        make_comment("c2", status="approved", content="کیفیت عالی", likes=10,
                     created_at="2024-05-03T10:00:00Z"),
        make_comment("c3", status="approved", content="Great fabric", first_name="John",
                     email="john@example.com", likes=1, created_at="2024-05-02T10:00:00Z"),
        make_comment("c4", status="rejected", content="بد بود", likes=0,
                     created_at="2024-05-04T10:00:00Z"),
        make_comment("c5", status="spam", content="buy cheap watches", likes=0,
                     created_at="2024-05-05T10:00:00Z"),
    ]
    return backend


@pytest.fixture
def transport(backend: FakeBackend) -> FlaskTransport:
    return FlaskTransport(create_fake_api(backend))


@pytest.fixture
async def storefront(test_config, store, transport):
    """A storefront with nobody signed in."""
    storefront = create_storefront(test_config, store=store, transport=transport)
    yield storefront
    await storefront.aclose()


@pytest.fixture
async def admin_storefront(storefront, store, backend):
    """A storefront whose store holds a valid admin token."""
    store.set(ADMIN_TOKEN_KEY, backend.issue_token(ADMIN_EMAIL))
    return storefront


# =============================================================================
# TEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "smoke: Quick smoke tests for critical paths")
    config.addinivalue_line("markers", "storage: Persistent key-value store tests")
    config.addinivalue_line("markers", "auth: Session and credential handling tests")
    config.addinivalue_line("markers", "cart: Local cart tests")
    config.addinivalue_line("markers", "comments: Comment moderation tests")
    config.addinivalue_line("markers", "reports: Sales analytics tests")
    config.addinivalue_line("markers", "cli: Command-line interface tests")
