# tests/unit/test_aggregates.py
"""Unit tests for AggregateService and its invalidation rules."""
from decimal import Decimal

import pytest

from src.om_order.application.aggregates import AggregateService
from src.om_order.application.schemas import GetOrdersRequest
from src.om_order.application.service import OrderApplicationService
from tests.fakes import (
    FIXED_NOW,
    FakeDatabaseError,
    FakeOrderRepository,
    FakeSession,
    make_order,
)


@pytest.fixture
def aggregates(order_repo, cache) -> AggregateService:
    return AggregateService(repo=order_repo, cache=cache)


@pytest.fixture
def orders(order_repo, cache, clock) -> OrderApplicationService:
    return OrderApplicationService(repo=order_repo, cache=cache, clock=clock)


class TestStatusCounts:
    @pytest.mark.asyncio
    async def test_counts_present_statuses_only(self, cache) -> None:
        repo = FakeOrderRepository([
            make_order(1, status="Hold"),
            make_order(2, status="Hold"),
            make_order(3, status="Delivered"),
        ])
        service = AggregateService(repo=repo, cache=cache)
        assert await service.status_counts(FakeSession(repo)) == {"Hold": 2, "Delivered": 1}

    @pytest.mark.asyncio
    async def test_failure_degrades_to_empty(self, order_repo, aggregates, db, caplog) -> None:
        order_repo.fail_with = FakeDatabaseError()
        with caplog.at_level("WARNING"):
            assert await aggregates.status_counts(db) == {}
        assert "op=status_counts kind=unexpected" in caplog.text

    @pytest.mark.asyncio
    async def test_cached_until_ttl(self, order_repo, aggregates, db, cache_clock) -> None:
        await aggregates.status_counts(db)
        order_repo.orders[1].status = "Issue"
        assert "Issue" not in await aggregates.status_counts(db)

        cache_clock.advance(3600)
        assert (await aggregates.status_counts(db))["Issue"] == 1


class TestCustomerCounts:
    @pytest.mark.asyncio
    async def test_counts_by_customer(self, order_repo, aggregates, db) -> None:
        order_repo.orders[1].customer = "EK"
        assert await aggregates.customer_counts(db) == {"TTK": 9, "EK": 1}

    @pytest.mark.asyncio
    async def test_failure_degrades_to_empty(self, order_repo, aggregates, db) -> None:
        order_repo.fail_with = FakeDatabaseError()
        assert await aggregates.customer_counts(db) == {}


class TestPoValueRange:
    @pytest.mark.asyncio
    async def test_min_and_max(self, order_repo, aggregates, db) -> None:
        order_repo.orders[3].po_value = Decimal("150.50")
        order_repo.orders[4].po_value = Decimal(9000)
        result = await aggregates.po_value_range(db)
        assert result.min == Decimal("150.5")
        assert result.max == Decimal(9000)

    @pytest.mark.asyncio
    async def test_empty_table_is_zero(self, cache) -> None:
        repo = FakeOrderRepository()
        result = await AggregateService(repo=repo, cache=cache).po_value_range(FakeSession(repo))
        assert result.min == 0
        assert result.max == 0

    @pytest.mark.asyncio
    async def test_failure_is_zero(self, order_repo, aggregates, db) -> None:
        order_repo.fail_with = TimeoutError()
        result = await aggregates.po_value_range(db)
        assert (result.min, result.max) == (0, 0)


class TestInvalidation:
    """Which writes refresh which aggregate."""

    @pytest.mark.asyncio
    async def test_status_update_refreshes_status_counts(self, aggregates, orders, db) -> None:
        await aggregates.status_counts(db)
        await orders.update_order(db, 1, {"status": "Hold"})
        assert (await aggregates.status_counts(db))["Hold"] == 1

    @pytest.mark.asyncio
    async def test_other_updates_leave_status_counts_cached(
        self, order_repo, aggregates, orders, db
    ) -> None:
        await aggregates.status_counts(db)
        order_repo.orders[2].status = "Issue"  # changed behind the cache's back
        await orders.update_order(db, 3, {"remarks": "chased"})
        assert "Issue" not in await aggregates.status_counts(db)

    @pytest.mark.asyncio
    async def test_updates_leave_customer_counts_and_range_cached(
        self, aggregates, orders, db
    ) -> None:
        await aggregates.customer_counts(db)
        await aggregates.po_value_range(db)

        await orders.update_order(db, 1, {"customer": "EK", "po_value": 5000, "status": "Hold"})

        assert "EK" not in await aggregates.customer_counts(db)
        assert (await aggregates.po_value_range(db)).max == Decimal(1000)

    @pytest.mark.asyncio
    async def test_create_refreshes_everything(self, aggregates, orders, db) -> None:
        await aggregates.status_counts(db)
        await aggregates.customer_counts(db)
        await aggregates.po_value_range(db)

        payload = {
            "part_number": "X1", "description": "SEAL", "qty": 1,
            "po_date": "2026-03-01", "term": "PREPAY", "customer": "QR",
            "cust_po": "PO 1", "status": "Hold", "currency": "EUR",
            "po_value": 4000, "costs": 100, "payment_received": "No",
            "investor_paid": "No", "supplier": "Collins Aerospace",
            "supplier_po": "PO2", "supplier_po_date": "2026-03-01",
        }
        result = await orders.create_order(db, payload)
        assert result.ok

        assert (await aggregates.status_counts(db))["Hold"] == 1
        assert (await aggregates.customer_counts(db))["QR"] == 1
        assert (await aggregates.po_value_range(db)).max == Decimal(4000)

    @pytest.mark.asyncio
    async def test_delete_refreshes_counts(self, order_repo, aggregates, orders, db) -> None:
        before = await aggregates.customer_counts(db)
        assert before == {"TTK": 10}

        await orders.delete_order(db, 1)

        after = await aggregates.customer_counts(db)
        assert sum(after.values()) == 10
        replacement = order_repo.orders[11]
        assert replacement.created_at == FIXED_NOW
        assert after.get(replacement.customer, 0) >= 1

    @pytest.mark.asyncio
    async def test_failed_mutation_invalidates_nothing(
        self, order_repo, aggregates, orders, db
    ) -> None:
        await aggregates.status_counts(db)
        order_repo.orders[2].status = "Issue"
        result = await orders.update_order(db, 99, {"status": "Hold"})
        assert not result.ok
        assert "Issue" not in await aggregates.status_counts(db)


class TestIndependenceFromListFilters:
    @pytest.mark.asyncio
    async def test_filtered_listing_does_not_narrow_aggregates(
        self, order_repo, aggregates, orders, db
    ) -> None:
        order_repo.orders[1].customer = "EK"
        order_repo.orders[1].status = "Hold"
        order_repo.orders[1].po_value = Decimal(50)

        page = await orders.get_orders(
            db, GetOrdersRequest(customer="EK", status=["Hold"], po_value=[0, 100])
        )
        assert [o.sn for o in page.data] == [1]

        assert await aggregates.status_counts(db) == {"Hold": 1, "Order processed": 9}
        assert await aggregates.customer_counts(db) == {"EK": 1, "TTK": 9}
        result = await aggregates.po_value_range(db)
        assert (result.min, result.max) == (Decimal(50), Decimal(1000))
