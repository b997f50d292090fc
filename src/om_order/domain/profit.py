"""Profit derivation for orders.

    gross_profit               = po_value - costs
    net_profit                 = po_value - (costs + freight_cost + customs_duty)
    profit_percent             = gross_profit / po_value * 100   (0 when po_value == 0)
    profit_percent_after_cost  = net_profit / po_value * 100     (0 when po_value == 0)

Missing duty / freight count as 0. Every figure is rounded half-up to 2 dp.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.om_order.domain.models import Order

_CENT = Decimal("0.01")
_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class ProfitFigures:
    gross_profit: Decimal
    net_profit: Decimal
    profit_percent: Decimal
    profit_percent_after_cost: Decimal


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a monetary input to Decimal; None becomes 0.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def derive_profit(
    po_value: Decimal | int | float,
    costs: Decimal | int | float,
    customs_duty: Decimal | int | float | None,
    freight_cost: Decimal | int | float | None,
) -> ProfitFigures:
    po = to_decimal(po_value)
    cost = to_decimal(costs)
    gross = po - cost
    net = po - (cost + to_decimal(freight_cost) + to_decimal(customs_duty))
    if po == 0:
        pct = Decimal(0)
        pct_after = Decimal(0)
    else:
        pct = gross / po * _HUNDRED
        pct_after = net / po * _HUNDRED
    return ProfitFigures(
        gross_profit=round2(gross),
        net_profit=round2(net),
        profit_percent=round2(pct),
        profit_percent_after_cost=round2(pct_after),
    )


def apply_profit(order: Order) -> Order:
    """Overwrite the derived fields of `order` from its monetary inputs."""
    figures = derive_profit(
        order.po_value, order.costs, order.customs_duty, order.freight_cost
    )
    order.gross_profit = figures.gross_profit
    order.net_profit = figures.net_profit
    order.profit_percent = figures.profit_percent
    order.profit_percent_after_cost = figures.profit_percent_after_cost
    return order
