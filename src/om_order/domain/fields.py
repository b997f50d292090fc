"""Closed registry of order fields usable in filters and sorting.

Filter clauses and sort items name fields by identifier; anything not listed
here is rejected before a query is built.
"""
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Any, Callable

from src.om_common.enums import Currency, OrderStatus, PaymentTerm, YesNo
from src.om_common.errors import InvalidFilterError, InvalidSortError
from src.om_order.domain.models import Order


class FieldKind(str, Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    CHOICE = "CHOICE"


@dataclass(frozen=True)
class OrderField:
    name: str
    kind: FieldKind
    choices: tuple[str, ...] = ()
    nullable: bool = False

    @property
    def accessor(self) -> Callable[[Order], Any]:
        return attrgetter(self.name)

    def value_of(self, order: Order) -> Any:
        return self.accessor(order)


def _choices(enum_cls: type[Enum]) -> tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


_FIELDS = (
    OrderField("sn", FieldKind.NUMBER),
    OrderField("part_number", FieldKind.TEXT),
    OrderField("description", FieldKind.TEXT),
    OrderField("qty", FieldKind.NUMBER),
    OrderField("po_date", FieldKind.DATE),
    OrderField("term", FieldKind.CHOICE, _choices(PaymentTerm)),
    OrderField("customer", FieldKind.TEXT),
    OrderField("cust_po", FieldKind.TEXT),
    OrderField("status", FieldKind.CHOICE, _choices(OrderStatus)),
    OrderField("remarks", FieldKind.TEXT),
    OrderField("currency", FieldKind.CHOICE, _choices(Currency)),
    OrderField("po_value", FieldKind.NUMBER),
    OrderField("costs", FieldKind.NUMBER),
    OrderField("customs_duty", FieldKind.NUMBER, nullable=True),
    OrderField("freight_cost", FieldKind.NUMBER, nullable=True),
    OrderField("gross_profit", FieldKind.NUMBER, nullable=True),
    OrderField("net_profit", FieldKind.NUMBER, nullable=True),
    OrderField("profit_percent", FieldKind.NUMBER, nullable=True),
    OrderField("profit_percent_after_cost", FieldKind.NUMBER, nullable=True),
    OrderField("payment_received", FieldKind.CHOICE, _choices(YesNo)),
    OrderField("investor_paid", FieldKind.CHOICE, _choices(YesNo)),
    OrderField("target_date", FieldKind.DATE, nullable=True),
    OrderField("dispatch_date", FieldKind.DATE, nullable=True),
    OrderField("supplier", FieldKind.TEXT),
    OrderField("supplier_po", FieldKind.TEXT),
    OrderField("supplier_po_date", FieldKind.DATE),
    OrderField("awb_to_uae", FieldKind.TEXT),
    OrderField("stability", FieldKind.NUMBER),
    OrderField("last_edited", FieldKind.TIMESTAMP, nullable=True),
    OrderField("created_at", FieldKind.TIMESTAMP),
    OrderField("updated_at", FieldKind.TIMESTAMP),
)

ORDER_FIELDS: dict[str, OrderField] = {f.name: f for f in _FIELDS}


@dataclass(frozen=True)
class SortKey:
    field: OrderField
    descending: bool = False


DEFAULT_SORT: tuple[SortKey, ...] = (SortKey(ORDER_FIELDS["created_at"], descending=True),)


def get_field(name: str) -> OrderField:
    try:
        return ORDER_FIELDS[name]
    except KeyError:
        raise InvalidFilterError(f"unknown field '{name}'") from None


def compile_sort(items: list[tuple[str, bool]]) -> tuple[SortKey, ...]:
    """Map (field, desc) pairs to SortKeys; empty input gives created_at DESC."""
    if not items:
        return DEFAULT_SORT
    keys = []
    for name, desc in items:
        field = ORDER_FIELDS.get(name)
        if field is None:
            raise InvalidSortError(name)
        keys.append(SortKey(field, descending=desc))
    return tuple(keys)
