"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.om_common.cache import CacheService, MemoryCacheStore
from tests.fakes import (
    FIXED_NOW,
    FakeClock,
    FakeCustomerRepository,
    FakeOrderRepository,
    FakeSession,
    make_order,
)


@pytest.fixture
def order_repo() -> FakeOrderRepository:
    return FakeOrderRepository([make_order(sn) for sn in range(1, 11)])


@pytest.fixture
def customer_repo(order_repo: FakeOrderRepository) -> FakeCustomerRepository:
    return FakeCustomerRepository(["TTK", "AAL"], order_repo=order_repo)


@pytest.fixture
def db(order_repo: FakeOrderRepository, customer_repo: FakeCustomerRepository) -> FakeSession:
    return FakeSession(order_repo, customer_repo)


@pytest.fixture
def cache_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(cache_clock: FakeClock) -> CacheService:
    return CacheService(MemoryCacheStore(clock=cache_clock))


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
