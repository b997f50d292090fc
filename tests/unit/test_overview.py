# tests/unit/test_overview.py
"""Unit tests for the dashboard KPI overview."""
from datetime import date
from decimal import Decimal

import pytest

from src.om_order.application.overview import (
    OverviewService,
    compute_overview,
    overdue,
    placed_in_month,
)
from src.om_order.application.service import OrderApplicationService
from tests.fakes import FakeDatabaseError, make_order

TODAY = date(2026, 3, 15)


@pytest.fixture
def population():
    return [
        # delivered this month, on time
        make_order(1, status="Delivered", po_date=date(2026, 3, 5),
                   target_date=date(2026, 3, 10), dispatch_date=date(2026, 3, 9),
                   payment_received="Yes"),
        # delivered this month, late
        make_order(2, status="Delivered", po_date=date(2026, 3, 6),
                   target_date=date(2026, 3, 10), dispatch_date=date(2026, 3, 12),
                   payment_received="Yes"),
        # delivered earlier, on time
        make_order(3, status="Delivered", po_date=date(2026, 1, 1),
                   target_date=date(2026, 1, 10), dispatch_date=date(2026, 1, 5),
                   payment_received="Yes"),
        # delivered without a dispatch date: neither on time nor late
        make_order(4, status="Delivered"),
        # open, placed this month, past its target
        make_order(5, status="Hold", po_date=date(2026, 3, 20),
                   target_date=date(2026, 3, 14)),
        # target is tomorrow, so not yet overdue
        make_order(6, status="Payment pending to Supplier",
                   target_date=date(2026, 3, 16)),
        # cancelled orders are never overdue
        make_order(7, status="Cancelled", target_date=date(2026, 1, 1)),
    ]


class TestComputeOverview:
    def test_counts(self, population) -> None:
        kpi = compute_overview(population, month=3, year=2026, today=TODAY, monthly_target=50)

        assert kpi.total_orders == 7
        assert kpi.overdue_orders == 1
        assert kpi.overdue_percent == Decimal("14.29")
        assert kpi.delivered_orders == 4
        assert kpi.target_achieved == 2
        assert kpi.target_not_achieved == 1
        assert kpi.target_achieved_percent == Decimal("50.00")
        assert kpi.target_not_achieved_percent == Decimal("25.00")

    def test_month_figures(self, population) -> None:
        kpi = compute_overview(population, month=3, year=2026, today=TODAY, monthly_target=50)

        assert kpi.delivered_in_month == 2
        assert kpi.target_achieved_in_month == 1
        assert kpi.target_not_achieved_in_month == 1
        assert kpi.target_achieved_in_month_percent == Decimal("50.00")
        assert kpi.monthly_total_profit == Decimal("900.00")
        assert kpi.monthly_realized_profit == Decimal("600.00")
        assert kpi.monthly_unrealized_profit == Decimal("300.00")
        assert kpi.deficit_excess == -49

    def test_money_totals(self, population) -> None:
        kpi = compute_overview(population, month=3, year=2026, today=TODAY, monthly_target=50)

        assert kpi.supplier_pending_payments == Decimal("700.00")
        assert kpi.accounts_receivable == Decimal("4000.00")

    def test_empty_population(self) -> None:
        kpi = compute_overview([], month=3, year=2026, today=TODAY, monthly_target=10)
        assert kpi.total_orders == 0
        assert kpi.overdue_percent == 0
        assert kpi.target_achieved_percent == 0
        assert kpi.deficit_excess == -10

    def test_serializes_money_as_numbers(self, population) -> None:
        kpi = compute_overview(population, month=3, year=2026, today=TODAY, monthly_target=50)
        body = kpi.model_dump(mode="json")
        assert body["overdue_percent"] == 14.29
        assert body["accounts_receivable"] == 4000.0


class TestPredicates:
    def test_overdue_excludes_closed_and_undated(self) -> None:
        predicate = overdue(TODAY)
        assert predicate.matches(make_order(1, target_date=date(2026, 3, 1)))
        assert not predicate.matches(make_order(2, target_date=None))
        assert not predicate.matches(
            make_order(3, status="Delivered", target_date=date(2026, 3, 1))
        )

    def test_overdue_from_the_target_day_itself(self) -> None:
        predicate = overdue(TODAY)
        assert predicate.matches(make_order(1, target_date=TODAY))
        assert not predicate.matches(make_order(2, target_date=date(2026, 3, 16)))

    def test_placed_in_month_handles_leap_february(self) -> None:
        predicate = placed_in_month(2024, 2)
        assert predicate.matches(make_order(1, po_date=date(2024, 2, 29)))
        assert not predicate.matches(make_order(2, po_date=date(2024, 3, 1)))


class TestOverviewService:
    @pytest.mark.asyncio
    async def test_defaults_to_current_month(self, order_repo, cache, clock, db) -> None:
        order_repo.orders[1].po_date = date(2026, 3, 2)
        service = OverviewService(
            OrderApplicationService(repo=order_repo, cache=cache, clock=clock)
        )

        kpi = await service.get_overview(db, today=TODAY)

        assert (kpi.month, kpi.year) == (3, 2026)
        assert kpi.total_orders == 10
        assert kpi.monthly_total_profit == Decimal("300.00")
        assert kpi.monthly_target == 50

    @pytest.mark.asyncio
    async def test_storage_failure_yields_zeroes(self, order_repo, cache, db) -> None:
        order_repo.fail_with = FakeDatabaseError()
        service = OverviewService(OrderApplicationService(repo=order_repo, cache=cache))

        kpi = await service.get_overview(db, month=1, year=2026, today=TODAY)

        assert kpi.total_orders == 0
        assert kpi.accounts_receivable == 0
