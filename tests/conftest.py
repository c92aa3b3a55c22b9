"""Test fixtures: in-memory SQLite store, chat service, mocked Railway HTTP."""

import json
from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio

from porter.chat.service import ChatService
from porter.config import Settings
from porter.railway.client import RailwayClient
from porter.railway.graphql import GraphQLClient
from porter.storage.database import Database
from porter.storage.documents import ChatStore

ENDPOINT = "https://backboard.test/graphql/v2"
TOKEN = "test-token-123"


# ---------------------------------------------------------------------------
# Settings / database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings pointed at an in-memory SQLite database."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        RAILWAY_API_TOKEN=TOKEN,
        railway_api_endpoint=ENDPOINT,
    )


@pytest_asyncio.fixture
async def db(settings):
    """Fresh database per test; the StaticPool keeps the in-memory DB alive."""
    database = Database(settings)
    await database.connect()
    yield database
    await database.disconnect()


@pytest.fixture
def store(db) -> ChatStore:
    return ChatStore(db)


@pytest.fixture
def chat_service(store) -> ChatService:
    return ChatService(store)


# ---------------------------------------------------------------------------
# Railway HTTP mocking
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request and its decoded JSON body."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def graphql_response(data: dict | None = None, status_code: int = 200, **body) -> Callable:
    """Handler returning a fixed GraphQL JSON envelope."""
    payload = dict(body)
    if data is not None:
        payload["data"] = data

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return handler


@pytest.fixture
def make_graphql():
    """Factory: handler -> (GraphQLClient, RecordingTransport)."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        http = httpx.AsyncClient(transport=transport)
        return GraphQLClient(ENDPOINT, TOKEN, http), transport

    return factory


@pytest.fixture
def make_railway(make_graphql):
    """Factory: handler -> (RailwayClient, RecordingTransport)."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]):
        graphql, transport = make_graphql(handler)
        return RailwayClient(graphql), transport

    return factory


# ---------------------------------------------------------------------------
# Simulated time
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock that only advances when sleep() is awaited."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
