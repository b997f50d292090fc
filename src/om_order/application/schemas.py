# src/om_order/application/schemas.py
"""Pydantic schemas for the order API.

Requests are where enumerations and numeric constraints are enforced; anything
that reaches the service layer has already been validated here.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator

from src.om_common.enums import (
    Currency,
    FilterFlag,
    FilterOperator,
    FilterVariant,
    JoinOperator,
    OrderStatus,
    PaymentTerm,
    YesNo,
)
from src.om_order.domain.filters import BasicFilters, FilterClause
from src.om_order.domain.models import Order

# Decimals travel as JSON numbers rather than pydantic's default strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

NonNegativeMoney = Annotated[
    Decimal,
    Field(ge=0, max_digits=14, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class SortItem(BaseModel):
    id: str
    desc: bool = False


class FilterClauseIn(BaseModel):
    field: str
    value: Any = None
    variant: FilterVariant
    operator: FilterOperator
    filter_id: str | None = None

    def to_domain(self) -> FilterClause:
        return FilterClause(
            field=self.field,
            operator=self.operator,
            value=self.value,
            variant=self.variant,
        )


class GetOrdersRequest(BaseModel):
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1, le=10000)
    sort: list[SortItem] = Field(default_factory=list)
    # Advanced mode
    filter_flag: FilterFlag | None = None
    filters: list[FilterClauseIn] = Field(default_factory=list)
    join_operator: JoinOperator = JoinOperator.AND
    # Basic mode
    part_number: str = ""
    customer: str = ""
    supplier: str = ""
    supplier_po: str = ""
    cust_po: str = ""
    status: list[str] = Field(default_factory=list)
    term: list[str] = Field(default_factory=list)
    currency: list[str] = Field(default_factory=list)
    payment_received: list[str] = Field(default_factory=list)
    po_value: list[float | None] = Field(default_factory=list, max_length=2)
    po_date: list[int | str | None] = Field(default_factory=list, max_length=2)

    @property
    def advanced(self) -> bool:
        return self.filter_flag is not None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def basic_filters(self) -> BasicFilters:
        return BasicFilters(
            part_number=self.part_number,
            customer=self.customer,
            supplier=self.supplier,
            supplier_po=self.supplier_po,
            cust_po=self.cust_po,
            status=tuple(self.status),
            term=tuple(self.term),
            currency=tuple(self.currency),
            payment_received=tuple(self.payment_received),
            po_value=tuple(self.po_value),
            po_date=tuple(self.po_date),
        )

    def sort_pairs(self) -> list[tuple[str, bool]]:
        return [(item.id, item.desc) for item in self.sort]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    part_number: str = Field(min_length=1)
    description: str = Field(min_length=1)
    qty: Decimal = Field(gt=0)
    po_date: date
    term: PaymentTerm
    customer: str = Field(min_length=1)
    cust_po: str = Field(min_length=1)
    status: OrderStatus
    remarks: str = ""
    currency: Currency
    po_value: NonNegativeMoney
    costs: NonNegativeMoney
    customs_duty: NonNegativeMoney | None = None
    freight_cost: NonNegativeMoney | None = None
    payment_received: YesNo
    investor_paid: YesNo
    target_date: date | None = None
    dispatch_date: date | None = None
    supplier_po_date: date
    supplier: str = Field(min_length=1)
    supplier_po: str = Field(min_length=1)
    awb_to_uae: str = ""
    stability: int = Field(10, ge=0, le=10)


_NULLABLE_UPDATE_FIELDS = frozenset({
    "customs_duty", "freight_cost", "target_date", "dispatch_date",
})


class UpdateOrderRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    model_config = ConfigDict(use_enum_values=True)

    part_number: str | None = Field(None, min_length=1)
    description: str | None = Field(None, min_length=1)
    qty: Decimal | None = Field(None, gt=0)
    po_date: date | None = None
    term: PaymentTerm | None = None
    customer: str | None = Field(None, min_length=1)
    cust_po: str | None = Field(None, min_length=1)
    status: OrderStatus | None = None
    remarks: str | None = None
    currency: Currency | None = None
    po_value: NonNegativeMoney | None = None
    costs: NonNegativeMoney | None = None
    customs_duty: NonNegativeMoney | None = None
    freight_cost: NonNegativeMoney | None = None
    payment_received: YesNo | None = None
    investor_paid: YesNo | None = None
    target_date: date | None = None
    dispatch_date: date | None = None
    supplier_po_date: date | None = None
    supplier: str | None = Field(None, min_length=1)
    supplier_po: str | None = Field(None, min_length=1)
    awb_to_uae: str | None = None
    stability: int | None = Field(None, ge=0, le=10)

    @model_validator(mode="after")
    def no_null_for_required_fields(self) -> "UpdateOrderRequest":
        for name in self.model_fields_set - _NULLABLE_UPDATE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent by the client."""
        return self.model_dump(exclude_unset=True)


class BulkUpdateOrdersRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    sns: list[int] = Field(min_length=1)
    status: OrderStatus | None = None
    payment_received: YesNo | None = None
    investor_paid: YesNo | None = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "BulkUpdateOrdersRequest":
        if self.status is None and self.payment_received is None and self.investor_paid is None:
            raise ValueError("status, payment_received or investor_paid is required")
        return self

    def changes(self) -> dict[str, str]:
        picked = {
            "status": self.status,
            "payment_received": self.payment_received,
            "investor_paid": self.investor_paid,
        }
        return {k: v for k, v in picked.items() if v is not None}


class BulkDeleteOrdersRequest(BaseModel):
    sns: list[int] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OrderResponse(BaseModel):
    sn: int
    slug: str
    part_number: str
    description: str
    qty: Money
    po_date: date
    term: str
    customer: str
    cust_po: str
    status: str
    remarks: str
    currency: str
    po_value: Money
    costs: Money
    customs_duty: Money | None = None
    freight_cost: Money | None = None
    gross_profit: Money | None = None
    net_profit: Money | None = None
    profit_percent: Money | None = None
    profit_percent_after_cost: Money | None = None
    payment_received: str
    investor_paid: str
    target_date: date | None = None
    dispatch_date: date | None = None
    supplier: str
    supplier_po: str
    supplier_po_date: date
    awb_to_uae: str
    stability: int
    last_edited: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            sn=order.sn,
            slug=order.slug,
            part_number=order.part_number,
            description=order.description,
            qty=order.qty,
            po_date=order.po_date,
            term=order.term,
            customer=order.customer,
            cust_po=order.cust_po,
            status=order.status,
            remarks=order.remarks,
            currency=order.currency,
            po_value=order.po_value,
            costs=order.costs,
            customs_duty=order.customs_duty,
            freight_cost=order.freight_cost,
            gross_profit=order.gross_profit,
            net_profit=order.net_profit,
            profit_percent=order.profit_percent,
            profit_percent_after_cost=order.profit_percent_after_cost,
            payment_received=order.payment_received,
            investor_paid=order.investor_paid,
            target_date=order.target_date,
            dispatch_date=order.dispatch_date,
            supplier=order.supplier,
            supplier_po=order.supplier_po,
            supplier_po_date=order.supplier_po_date,
            awb_to_uae=order.awb_to_uae,
            stability=order.stability,
            last_edited=order.last_edited,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    data: list[OrderResponse]
    page_count: int


class PoValueRange(BaseModel):
    min: Money
    max: Money
