"""Random demo orders, used for seeding and as replacements for deleted orders."""
import random
from datetime import date, datetime, timedelta
from decimal import Decimal

from src.om_common.datetime_utils import utc_now
from src.om_order.domain.models import Order
from src.om_order.domain.profit import apply_profit

PART_NUMBERS = (
    "C20207000", "P199753", "A45892", "B78321",
    "D12456", "E98765", "F34567", "G87654",
)
DESCRIPTIONS = (
    "HUBCAP", "FILTER", "BEARING", "GASKET",
    "VALVE", "CONNECTOR", "SEAL", "BRACKET",
)
CUSTOMERS = ("TTK", "AAL", "EK", "QR", "SV")
SUPPLIERS = (
    "GMF AeroAsia Tbk",
    "Air Industries France, Inc",
    "Honeywell Aerospace",
    "Collins Aerospace",
    "Parker Hannifin",
)
# Only a subset of the lifecycle shows up in generated data
STATUSES = (
    "Order yet to be processed",
    "Order processed",
    "Supplier Paid",
    "Transit to UAE",
    "Received in UAE",
    "Ready for Dispatch",
    "Delivered",
)
TERMS = ("PREPAY", "NET 7", "NET 30")
CURRENCIES = ("USD", "EUR", "AED")
YES_NO = ("Yes", "No")

_RANGE_START = date(2024, 1, 1)
_RANGE_DAYS = (date(2025, 12, 31) - _RANGE_START).days


def _random_date(rng: random.Random) -> date:
    return _RANGE_START + timedelta(days=rng.randint(0, _RANGE_DAYS))


def generate_random_order(
    sn: int,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> Order:
    rng = rng or random.Random()
    now = now or utc_now()

    po_value = rng.randint(100, 10099)
    costs = int(po_value * (0.6 + rng.random() * 0.3))
    customs_duty = Decimal(int(costs * 0.05)) if rng.random() > 0.5 else None
    freight_cost = Decimal(rng.randint(0, 499)) if rng.random() > 0.5 else None

    order = Order(
        sn=sn,
        part_number=rng.choice(PART_NUMBERS),
        description=rng.choice(DESCRIPTIONS),
        qty=Decimal(rng.randint(1, 20)),
        po_date=_random_date(rng),
        term=rng.choice(TERMS),
        customer=rng.choice(CUSTOMERS),
        cust_po=f"PO {9000 + sn}",
        status=rng.choice(STATUSES),
        remarks="Urgent delivery required" if rng.random() > 0.7 else "",
        currency=rng.choice(CURRENCIES),
        po_value=Decimal(po_value),
        costs=Decimal(costs),
        customs_duty=customs_duty,
        freight_cost=freight_cost,
        payment_received=rng.choice(YES_NO),
        investor_paid=rng.choice(YES_NO),
        target_date=_random_date(rng),
        dispatch_date=_random_date(rng) if rng.random() > 0.5 else None,
        supplier=rng.choice(SUPPLIERS),
        supplier_po=f"PO24{sn:04d}",
        supplier_po_date=_random_date(rng),
        awb_to_uae=str(rng.randint(1_000_000_000, 9_999_999_999)) if rng.random() > 0.3 else "",
        stability=rng.randint(1, 10),
        last_edited=now,
        created_at=now,
        updated_at=now,
    )
    return apply_profit(order)
