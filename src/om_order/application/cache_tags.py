"""Cache keys and invalidation tags for order reads.

    create / delete  → ORDERS, STATUS_COUNTS, CUSTOMER_COUNTS, PO_VALUE_RANGE
    update           → ORDERS, plus STATUS_COUNTS only when a status was sent

Customer counts and the PO value range are deliberately left alone on updates.
"""
import hashlib

ORDERS = "orders"
STATUS_COUNTS = "order-status-counts"
CUSTOMER_COUNTS = "order-customer-counts"
PO_VALUE_RANGE = "po-value-range"

POPULATION_CHANGE_TAGS = (ORDERS, STATUS_COUNTS, CUSTOMER_COUNTS, PO_VALUE_RANGE)


def update_tags(status_changed: bool) -> tuple[str, ...]:
    return (ORDERS, STATUS_COUNTS) if status_changed else (ORDERS,)


def query_key(request_json: str) -> str:
    digest = hashlib.sha256(request_json.encode()).hexdigest()
    return f"orders:query:{digest}"


def slug_key(slug: str) -> str:
    return f"order-{slug}"
