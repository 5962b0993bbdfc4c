import random
from collections.abc import Mapping
from typing import Any

import pytest

from stockwatch.exceptions import StorageError, TransportError
from stockwatch.market.memory_cache import MemoryCache
from stockwatch.market.mock import MockDataSynthesizer
from stockwatch.market.providers.base import MarketDataProvider
from stockwatch.market.service import MarketDataService
from stockwatch.market.throttle import RequestThrottle
from stockwatch.state.store import AppStore
from stockwatch.storage.backend import InMemoryKeyValueBackend, KeyValueBackend
from stockwatch.storage.service import PersistentCacheStore


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


class FakeProvider(MarketDataProvider):
    """Answers each function with a canned payload or raises a canned error."""

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    async def query(self, function: str, params: Mapping[str, str]) -> dict[str, Any]:
        self.calls.append((function, dict(params)))
        response = self.responses.get(function)
        if callable(response):
            response = response(dict(params))
        if isinstance(response, BaseException):
            raise response
        if response is None:
            raise TransportError(f"{function} unavailable")
        return response

    async def aclose(self) -> None:
        self.closed = True

    def functions(self) -> list[str]:
        return [function for function, _ in self.calls]


class FailingBackend(KeyValueBackend):
    async def get_item(self, key: str) -> str | None:
        raise StorageError("disk unavailable")

    async def set_item(self, key: str, value: str) -> None:
        raise StorageError("disk full")

    async def remove_item(self, key: str) -> None:
        raise StorageError("disk unavailable")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> InMemoryKeyValueBackend:
    return InMemoryKeyValueBackend()


@pytest.fixture
def persistent(backend, clock) -> PersistentCacheStore:
    return PersistentCacheStore(backend, clock=clock)


@pytest.fixture
def memory(clock) -> MemoryCache:
    return MemoryCache(default_ttl=300.0, clock=clock)


@pytest.fixture
def throttle(clock) -> RequestThrottle:
    return RequestThrottle(min_interval=12.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def market(provider, throttle, memory, persistent) -> MarketDataService:
    return MarketDataService(
        provider,
        throttle,
        memory,
        persistent,
        mock=MockDataSynthesizer(random.Random(7)),
    )


@pytest.fixture
def store(persistent) -> AppStore:
    return AppStore(persistent)
