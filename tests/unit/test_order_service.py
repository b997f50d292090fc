# tests/unit/test_order_service.py
"""Unit tests for OrderApplicationService against the in-memory repository."""
import random
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from src.om_common.errors import (
    InvalidFilterError,
    InvalidSortError,
    NoOrderToEvictError,
    PersistenceError,
)
from src.om_common.query_failures import QueryFailureKind, classify_query_failure
from src.om_order.application.schemas import GetOrdersRequest
from src.om_order.application.service import OrderApplicationService, parse_slug
from src.om_order.domain.profit import derive_profit
from tests.fakes import (
    FIXED_NOW,
    FakeDatabaseError,
    FakeOrderRepository,
    FakeSession,
    make_order,
)


def _create_payload(**overrides) -> dict:
    payload = {
        "part_number": "C20207000",
        "description": "HUBCAP",
        "qty": 2,
        "po_date": "2026-03-01",
        "term": "NET 30",
        "customer": "EK",
        "cust_po": "PO 7001",
        "status": "Order yet to be processed",
        "currency": "USD",
        "po_value": 1000,
        "costs": 600,
        "customs_duty": 50,
        "freight_cost": 30,
        "payment_received": "No",
        "investor_paid": "No",
        "supplier": "Parker Hannifin",
        "supplier_po": "PO240001",
        "supplier_po_date": "2026-03-02",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def svc(order_repo, cache, clock) -> OrderApplicationService:
    return OrderApplicationService(
        repo=order_repo, cache=cache, clock=clock, rng=random.Random(7)
    )


class TestGetOrders:
    @pytest.mark.asyncio
    async def test_first_page_newest_first(self, svc, db) -> None:
        resp = await svc.get_orders(db, GetOrdersRequest(page=1, per_page=3))
        assert [o.sn for o in resp.data] == [10, 9, 8]
        assert resp.page_count == 4

    @pytest.mark.asyncio
    async def test_last_partial_page(self, svc, db) -> None:
        resp = await svc.get_orders(db, GetOrdersRequest(page=4, per_page=3))
        assert [o.sn for o in resp.data] == [1]
        assert resp.page_count == 4

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, svc, db) -> None:
        resp = await svc.get_orders(db, GetOrdersRequest(page=9, per_page=3))
        assert resp.data == []
        assert resp.page_count == 4

    @pytest.mark.asyncio
    async def test_ties_broken_by_serial(self, svc, db) -> None:
        # every fixture order has po_value 1000
        request = GetOrdersRequest(per_page=4, sort=[{"id": "po_value", "desc": True}])
        resp = await svc.get_orders(db, request)
        assert [o.sn for o in resp.data] == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_basic_filters(self, order_repo, svc, db) -> None:
        order_repo.orders[2].customer = "ttk-north"
        order_repo.orders[3].customer = "EK"
        order_repo.orders[2].po_value = Decimal(300)
        request = GetOrdersRequest(customer="ttk", po_value=[100, 500])
        resp = await svc.get_orders(db, request)
        assert [o.sn for o in resp.data] == [2]
        assert resp.page_count == 1

    @pytest.mark.asyncio
    async def test_advanced_filters_ignore_basic_fields(self, order_repo, svc, db) -> None:
        order_repo.orders[4].status = "Hold"
        request = GetOrdersRequest(
            filter_flag="advancedFilters",
            customer="nobody",
            filters=[{
                "field": "status", "value": ["Hold"],
                "variant": "multiSelect", "operator": "inArray",
            }],
        )
        resp = await svc.get_orders(db, request)
        assert [o.sn for o in resp.data] == [4]

    @pytest.mark.asyncio
    async def test_no_match_is_empty_with_zero_pages(self, svc, db) -> None:
        resp = await svc.get_orders(db, GetOrdersRequest(customer="nobody"))
        assert resp.data == []
        assert resp.page_count == 0

    @pytest.mark.asyncio
    async def test_invalid_filter_raises(self, svc, db) -> None:
        request = GetOrdersRequest(
            filter_flag="advancedFilters",
            filters=[{"field": "secret", "value": "x", "variant": "text", "operator": "eq"}],
        )
        with pytest.raises(InvalidFilterError):
            await svc.get_orders(db, request)

    @pytest.mark.asyncio
    async def test_invalid_sort_raises(self, svc, db) -> None:
        with pytest.raises(InvalidSortError):
            await svc.get_orders(db, GetOrdersRequest(sort=[{"id": "nope"}]))


class TestQueryFailures:
    @pytest.mark.asyncio
    async def test_database_error_degrades_to_empty(self, order_repo, svc, db, caplog) -> None:
        order_repo.fail_with = OperationalError("SELECT", {}, Exception("boom"))
        with caplog.at_level("WARNING"):
            resp = await svc.get_orders(db, GetOrdersRequest())
        assert resp.data == []
        assert resp.page_count == 0
        assert "op=get_orders kind=database" in caplog.text

    @pytest.mark.asyncio
    async def test_timeout_classified(self, order_repo, svc, db, caplog) -> None:
        order_repo.fail_with = TimeoutError()
        with caplog.at_level("WARNING"):
            resp = await svc.get_orders(db, GetOrdersRequest())
        assert resp.page_count == 0
        assert "kind=timeout" in caplog.text

    def test_classification(self) -> None:
        assert classify_query_failure("x", ValueError()) is QueryFailureKind.UNEXPECTED
        assert classify_query_failure("x", TimeoutError()) is QueryFailureKind.TIMEOUT
        db_error = OperationalError("SELECT", {}, Exception("boom"))
        assert classify_query_failure("x", db_error) is QueryFailureKind.DATABASE


class TestQueryCache:
    @pytest.mark.asyncio
    async def test_repeated_query_served_from_cache(self, order_repo, svc, db, cache_clock) -> None:
        await svc.get_orders(db, GetOrdersRequest())
        await svc.get_orders(db, GetOrdersRequest())
        assert order_repo.query_calls == 1

        cache_clock.advance(1)
        await svc.get_orders(db, GetOrdersRequest())
        assert order_repo.query_calls == 2

    @pytest.mark.asyncio
    async def test_different_request_is_a_different_entry(self, order_repo, svc, db) -> None:
        await svc.get_orders(db, GetOrdersRequest(page=1))
        await svc.get_orders(db, GetOrdersRequest(page=2))
        assert order_repo.query_calls == 2

    @pytest.mark.asyncio
    async def test_mutation_invalidates_cached_pages(self, order_repo, svc, db) -> None:
        before = await svc.get_orders(db, GetOrdersRequest(per_page=20))
        await svc.delete_order(db, 5)
        after = await svc.get_orders(db, GetOrdersRequest(per_page=20))
        assert order_repo.query_calls == 2
        assert 5 in [o.sn for o in before.data]
        assert 5 not in [o.sn for o in after.data]


class TestGetOrderBySlug:
    @pytest.mark.parametrize(
        ("slug", "expected"),
        [("3-PO 9003-P0003", 3), ("12-a-b-c", 12), ("abc", None), ("x-y-z", None), ("1-2", None)],
    )
    def test_parse_slug(self, slug, expected) -> None:
        assert parse_slug(slug) == expected

    @pytest.mark.asyncio
    async def test_found(self, svc, db) -> None:
        order = await svc.get_order_by_slug(db, "3-PO 9003-P0003")
        assert order.sn == 3
        assert order.slug == "3-PO 9003-P0003"

    @pytest.mark.asyncio
    async def test_malformed_or_unknown(self, svc, db) -> None:
        assert await svc.get_order_by_slug(db, "not-a-slug") is None
        assert await svc.get_order_by_slug(db, "999-PO-X") is None


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_population_stays_constant(self, order_repo, svc, db) -> None:
        result = await svc.create_order(db, _create_payload())

        assert result.ok
        assert len(order_repo.orders) == 10
        assert 11 in order_repo.orders
        assert 1 not in order_repo.orders  # oldest by created_at

    @pytest.mark.asyncio
    async def test_derives_profit_and_timestamps(self, order_repo, svc, db) -> None:
        await svc.create_order(db, _create_payload())
        created = order_repo.orders[11]
        assert created.gross_profit == Decimal("400.00")
        assert created.net_profit == Decimal("320.00")
        assert created.profit_percent == Decimal("40.00")
        assert created.profit_percent_after_cost == Decimal("32.00")
        assert created.created_at == created.last_edited == FIXED_NOW
        assert created.po_date == date(2026, 3, 1)
        assert created.status == "Order yet to be processed"

    @pytest.mark.asyncio
    async def test_empty_table_rejects_create(self, cache, clock) -> None:
        repo = FakeOrderRepository()
        svc = OrderApplicationService(repo=repo, cache=cache, clock=clock)
        session = FakeSession(repo)

        result = await svc.create_order(session, _create_payload())

        assert result.data is None
        assert result.error == NoOrderToEvictError().message
        assert repo.orders == {}
        assert session.rollbacks == 1

    @pytest.mark.asyncio
    async def test_serialized_with_table_lock(self, order_repo, svc, db) -> None:
        await svc.create_order(db, _create_payload())
        assert order_repo.lock_calls == 1

    @pytest.mark.asyncio
    async def test_invalid_payload_reports_error(self, order_repo, svc, db) -> None:
        result = await svc.create_order(db, _create_payload(currency="GBP"))
        assert not result.ok
        assert "currency" in result.error
        assert sorted(order_repo.orders) == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_negative_money_rejected(self, svc, db) -> None:
        result = await svc.create_order(db, _create_payload(costs=-1))
        assert "costs" in result.error

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic_and_logged(self, order_repo, svc, db, caplog) -> None:
        order_repo.fail_with = FakeDatabaseError("connection reset")
        with caplog.at_level("ERROR"):
            result = await svc.create_order(db, _create_payload())
        assert result.error == PersistenceError().message
        assert "create_order failed" in caplog.text

    @pytest.mark.asyncio
    async def test_failure_after_insert_rolls_back(self, order_repo, svc, db, monkeypatch) -> None:
        async def broken_oldest(db, exclude_sn):
            raise FakeDatabaseError("lost connection")

        monkeypatch.setattr(order_repo, "oldest_sn", broken_oldest)
        result = await svc.create_order(db, _create_payload())

        assert not result.ok
        assert 11 not in order_repo.orders
        assert db.rollbacks == 1


class TestUpdateOrder:
    @pytest.mark.asyncio
    async def test_monetary_change_rederives_profit(self, order_repo, svc, db) -> None:
        result = await svc.update_order(db, 2, {"po_value": 2000, "freight_cost": 100})

        assert result.ok
        updated = order_repo.orders[2]
        assert updated.po_value == Decimal(2000)
        assert updated.gross_profit == Decimal("1300.00")
        assert updated.net_profit == Decimal("1200.00")
        assert updated.last_edited == FIXED_NOW

    @pytest.mark.asyncio
    async def test_non_monetary_change_keeps_other_fields(self, order_repo, svc, db) -> None:
        before = order_repo.orders[2]
        await svc.update_order(db, 2, {"remarks": "call supplier"})
        after = order_repo.orders[2]
        assert after.remarks == "call supplier"
        assert after.customer == before.customer
        assert after.gross_profit == before.gross_profit
        assert after.created_at == before.created_at

    @pytest.mark.asyncio
    async def test_clearing_optional_cost(self, order_repo, svc, db) -> None:
        order_repo.orders[2].customs_duty = Decimal(100)
        await svc.update_order(db, 2, {"customs_duty": None})
        assert order_repo.orders[2].customs_duty is None
        assert order_repo.orders[2].net_profit == Decimal("300.00")

    @pytest.mark.asyncio
    async def test_null_for_required_field_rejected(self, svc, db) -> None:
        result = await svc.update_order(db, 2, {"customer": None})
        assert "customer cannot be null" in result.error

    @pytest.mark.asyncio
    async def test_unknown_order(self, svc, db) -> None:
        result = await svc.update_order(db, 99, {"remarks": "x"})
        assert result.error == "Order not found: 99"

    @pytest.mark.asyncio
    async def test_any_status_transition_allowed(self, order_repo, svc, db) -> None:
        order_repo.orders[2].status = "Delivered"
        result = await svc.update_order(db, 2, {"status": "Order yet to be processed"})
        assert result.ok
        assert order_repo.orders[2].status == "Order yet to be processed"


class TestBulkUpdate:
    @pytest.mark.asyncio
    async def test_updates_all_listed(self, order_repo, svc, db) -> None:
        result = await svc.bulk_update_orders(
            db, {"sns": [1, 2, 2], "status": "Delivered", "payment_received": "Yes"}
        )
        assert result.ok
        for sn in (1, 2):
            assert order_repo.orders[sn].status == "Delivered"
            assert order_repo.orders[sn].payment_received == "Yes"
            assert order_repo.orders[sn].last_edited == FIXED_NOW
        assert order_repo.orders[3].status == "Order processed"

    @pytest.mark.asyncio
    async def test_all_or_nothing(self, order_repo, svc, db) -> None:
        result = await svc.bulk_update_orders(db, {"sns": [1, 99], "status": "Hold"})
        assert result.error == "Order not found: 99"
        assert order_repo.orders[1].status == "Order processed"

    @pytest.mark.asyncio
    async def test_requires_a_field(self, svc, db) -> None:
        result = await svc.bulk_update_orders(db, {"sns": [1]})
        assert not result.ok


class TestDeleteOrder:
    @pytest.mark.asyncio
    async def test_replaced_by_generated_order(self, order_repo, svc, db) -> None:
        result = await svc.delete_order(db, 3)

        assert result.ok
        assert len(order_repo.orders) == 10
        assert 3 not in order_repo.orders
        replacement = order_repo.orders[11]
        expected = derive_profit(
            replacement.po_value, replacement.costs,
            replacement.customs_duty, replacement.freight_cost,
        )
        assert replacement.net_profit == expected.net_profit
        assert replacement.created_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_unknown_order_changes_nothing(self, order_repo, svc, db) -> None:
        result = await svc.delete_order(db, 42)
        assert result.error == "Order not found: 42"
        assert sorted(order_repo.orders) == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_bulk_delete(self, order_repo, svc, db) -> None:
        result = await svc.bulk_delete_orders(db, {"sns": [1, 2, 3]})
        assert result.ok
        assert sorted(order_repo.orders) == list(range(4, 14))

    @pytest.mark.asyncio
    async def test_bulk_delete_all_or_nothing(self, order_repo, svc, db) -> None:
        result = await svc.bulk_delete_orders(db, {"sns": [1, 77]})
        assert result.error == "Order not found: 77"
        assert 1 in order_repo.orders
        assert len(order_repo.orders) == 10


class TestSeed:
    @pytest.mark.asyncio
    async def test_replaces_population(self, order_repo, svc, db) -> None:
        order_repo.orders[1] = make_order(1, customer="OLD")
        result = await svc.seed_orders(db, 5)
        assert result.ok
        assert sorted(order_repo.orders) == [1, 2, 3, 4, 5]
        assert order_repo.orders[1].customer != "OLD"

    @pytest.mark.asyncio
    async def test_rejects_non_positive(self, order_repo, svc, db) -> None:
        result = await svc.seed_orders(db, 0)
        assert not result.ok
        assert len(order_repo.orders) == 10
