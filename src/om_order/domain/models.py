"""Order domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass
class Order:
    sn: int  # serial number, max(sn) + 1 at creation
    part_number: str
    description: str
    qty: Decimal
    po_date: date
    term: str  # PREPAY / NET 7 / NET 30
    customer: str  # matched by name, not a foreign key
    cust_po: str
    status: str  # one of OrderStatus
    currency: str  # USD / EUR / AED / INR
    po_value: Decimal
    costs: Decimal
    payment_received: str  # Yes / No
    investor_paid: str  # Yes / No
    supplier: str
    supplier_po: str
    supplier_po_date: date
    remarks: str = ""
    customs_duty: Decimal | None = None
    freight_cost: Decimal | None = None
    # Derived by derive_profit(); None only until first computed
    gross_profit: Decimal | None = None
    net_profit: Decimal | None = None
    profit_percent: Decimal | None = None
    profit_percent_after_cost: Decimal | None = None
    target_date: date | None = None
    dispatch_date: date | None = None
    awb_to_uae: str = ""
    stability: int = 10  # 0-10
    last_edited: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def slug(self) -> str:
        return f"{self.sn}-{self.cust_po}-{self.part_number}"

    @property
    def is_open(self) -> bool:
        return self.status not in ("Delivered", "Cancelled")


# Inputs of derive_profit(); an update touching any of them re-derives profit.
MONETARY_FIELDS = frozenset({"po_value", "costs", "customs_duty", "freight_cost"})
