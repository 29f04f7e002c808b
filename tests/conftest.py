"""Test fixtures."""

from collections import Counter
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from billing_bridge.config import Settings
from billing_bridge.main import create_app
from billing_bridge.services.salesforce_session import SalesforceSession
from billing_bridge.tools.base import ToolResult
from billing_bridge.tools.dispatcher import ToolDispatcher
from billing_bridge.tools.registry import build_registry
from tests.fakes import FakeSalesforce


class StubRecordStore:
    """In-memory record store that counts calls per operation."""

    def __init__(
        self,
        invoices: ToolResult | None = None,
        accounts: ToolResult | None = None,
        usage_records: ToolResult | None = None,
        payments: ToolResult | None = None,
    ) -> None:
        self.results = {
            "query_invoices": invoices or ToolResult.of_records([], 0),
            "query_accounts": accounts or ToolResult.of_records([], 0),
            "query_usage_records": usage_records or ToolResult.of_records([], 0),
            "query_payments": payments or ToolResult.of_records([], 0),
        }
        self.calls: Counter = Counter()
        self.params: dict[str, list[dict[str, Any]]] = {name: [] for name in self.results}

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def _record(self, operation: str, params: dict[str, Any] | None) -> ToolResult:
        self.calls[operation] += 1
        self.params[operation].append(dict(params or {}))
        result = self.results[operation]
        if isinstance(result, Exception):
            raise result
        return result

    async def query_invoices(self, params=None) -> ToolResult:
        return self._record("query_invoices", params)

    async def query_accounts(self, params=None) -> ToolResult:
        return self._record("query_accounts", params)

    async def query_usage_records(self, params=None) -> ToolResult:
        return self._record("query_usage_records", params)

    async def query_payments(self, params=None) -> ToolResult:
        return self._record("query_payments", params)


@pytest.fixture
def store():
    """Stub record store with empty results."""
    return StubRecordStore()


@pytest.fixture
def registry(store):
    """Registry bound to the stub store."""
    return build_registry(store)


@pytest.fixture
def dispatcher(registry):
    """Dispatcher without schema validation."""
    return ToolDispatcher(registry)


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, API_KEY="", LOG_REQUESTS=False)


@pytest.fixture
def app(settings, store):
    """Application bound to the stub store."""
    return create_app(settings=settings, store=store)


@pytest_asyncio.fixture
async def client(app):
    """Create test HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def salesforce(monkeypatch):
    """Fake simple-salesforce login and client."""
    fake = FakeSalesforce()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def sf_settings():
    """Settings with Salesforce credentials."""
    return Settings(
        _env_file=None,
        SALESFORCE_LOGIN_URL="https://login.salesforce.com/",
        SALESFORCE_USERNAME="ops@example.com",
        SALESFORCE_PASSWORD="secret",
        SALESFORCE_SECURITY_TOKEN="TOKEN123",
    )


@pytest.fixture
def sf_session(sf_settings, salesforce):
    """Session wired to the fake."""
    return SalesforceSession(sf_settings, http_session=salesforce.http)
