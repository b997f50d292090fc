# src/om_order/application/overview.py
"""KPI overview for the dashboard landing page.

Computed in-process over the whole population with the same predicates the
list view compiles, so a KPI and its "view list" filter always agree.
"""

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.datetime_utils import utc_today
from src.om_common.enums import OrderStatus
from src.om_order.application.schemas import Money
from src.om_order.application.service import OrderApplicationService
from src.om_order.domain.fields import ORDER_FIELDS
from src.om_order.domain.filters import AllOf, DayRange, Equals, OneOf, Predicate
from src.om_order.domain.models import Order
from src.om_order.domain.profit import round2, to_decimal

_STATUS = ORDER_FIELDS["status"]
_TARGET_DATE = ORDER_FIELDS["target_date"]
_PO_DATE = ORDER_FIELDS["po_date"]

DELIVERED = Equals(_STATUS, OrderStatus.DELIVERED.value)
SUPPLIER_PAYMENT_PENDING = Equals(_STATUS, OrderStatus.PAYMENT_PENDING_TO_SUPPLIER.value)


def overdue(today: date) -> Predicate:
    """Still open with a target date of today or earlier."""
    return AllOf((
        OneOf(
            _STATUS,
            (OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value),
            negated=True,
        ),
        DayRange(_TARGET_DATE, end=today),
    ))


def placed_in_month(year: int, month: int) -> Predicate:
    last_day = calendar.monthrange(year, month)[1]
    return DayRange(_PO_DATE, start=date(year, month, 1), end=date(year, month, last_day))


def _on_time(order: Order) -> bool | None:
    """None when either date is missing; such orders count as neither."""
    if order.dispatch_date is None or order.target_date is None:
        return None
    return order.dispatch_date <= order.target_date


def _percent(part: int, whole: int) -> Decimal:
    if whole == 0:
        return Decimal(0)
    return round2(Decimal(part) / Decimal(whole) * 100)


def _total(values: Iterable[Decimal | None]) -> Decimal:
    return round2(sum((to_decimal(v) for v in values), Decimal(0)))


class OverviewResponse(BaseModel):
    month: int
    year: int
    total_orders: int
    overdue_orders: int
    overdue_percent: Money
    delivered_orders: int
    target_achieved: int
    target_not_achieved: int
    target_achieved_percent: Money
    target_not_achieved_percent: Money
    delivered_in_month: int
    target_achieved_in_month: int
    target_not_achieved_in_month: int
    target_achieved_in_month_percent: Money
    target_not_achieved_in_month_percent: Money
    monthly_total_profit: Money
    monthly_realized_profit: Money
    monthly_unrealized_profit: Money
    supplier_pending_payments: Money
    accounts_receivable: Money
    monthly_target: int
    deficit_excess: int


@dataclass(frozen=True)
class _DeliveryTally:
    delivered: int
    on_time: int
    late: int

    @classmethod
    def of(cls, orders: list[Order]) -> "_DeliveryTally":
        verdicts = [_on_time(o) for o in orders]
        return cls(
            delivered=len(orders),
            on_time=sum(1 for v in verdicts if v is True),
            late=sum(1 for v in verdicts if v is False),
        )


def compute_overview(
    orders: list[Order],
    month: int,
    year: int,
    today: date,
    monthly_target: int,
) -> OverviewResponse:
    in_month = placed_in_month(year, month)
    delivered = [o for o in orders if DELIVERED.matches(o)]
    month_orders = [o for o in orders if in_month.matches(o)]
    month_delivered = [o for o in month_orders if DELIVERED.matches(o)]

    overdue_count = sum(1 for o in orders if overdue(today).matches(o))
    all_time = _DeliveryTally.of(delivered)
    this_month = _DeliveryTally.of(month_delivered)

    return OverviewResponse(
        month=month,
        year=year,
        total_orders=len(orders),
        overdue_orders=overdue_count,
        overdue_percent=_percent(overdue_count, len(orders)),
        delivered_orders=all_time.delivered,
        target_achieved=all_time.on_time,
        target_not_achieved=all_time.late,
        target_achieved_percent=_percent(all_time.on_time, all_time.delivered),
        target_not_achieved_percent=_percent(all_time.late, all_time.delivered),
        delivered_in_month=this_month.delivered,
        target_achieved_in_month=this_month.on_time,
        target_not_achieved_in_month=this_month.late,
        target_achieved_in_month_percent=_percent(this_month.on_time, this_month.delivered),
        target_not_achieved_in_month_percent=_percent(this_month.late, this_month.delivered),
        monthly_total_profit=_total(o.net_profit for o in month_orders),
        monthly_realized_profit=_total(o.net_profit for o in month_delivered),
        monthly_unrealized_profit=_total(
            o.net_profit for o in month_orders if not DELIVERED.matches(o)
        ),
        supplier_pending_payments=_total(
            o.costs for o in orders if SUPPLIER_PAYMENT_PENDING.matches(o)
        ),
        accounts_receivable=_total(
            o.po_value for o in orders if o.payment_received.lower() != "yes"
        ),
        monthly_target=monthly_target,
        deficit_excess=this_month.on_time - monthly_target,
    )


class OverviewService:
    def __init__(self, orders: OrderApplicationService | None = None) -> None:
        self._orders = orders or OrderApplicationService()

    async def get_overview(
        self,
        db: AsyncSession,
        month: int | None = None,
        year: int | None = None,
        today: date | None = None,
    ) -> OverviewResponse:
        today = today or utc_today()
        orders = await self._orders.list_all_orders(db)
        return compute_overview(
            orders,
            month=month or today.month,
            year=year or today.year,
            today=today,
            monthly_target=settings.OVERVIEW_MONTHLY_TARGET,
        )
