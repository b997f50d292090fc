"""Global enums — must match DB CHECK constraints exactly.

Order labels are stored verbatim (human-readable), so the enum values are the
labels shown on the dashboard.
"""

from enum import Enum


class OrderStatus(str, Enum):
    ORDER_YET_TO_BE_PROCESSED = "Order yet to be processed"
    ORDER_PROCESSED = "Order processed"
    CANCELLED = "Cancelled"
    PAYMENT_PENDING_TO_SUPPLIER = "Payment pending to Supplier"
    SUPPLIER_PAID = "Supplier Paid"
    LONG_LT_AWAITING_ESD = "Long LT - Awaiting ESD"
    LONG_LT_ESD_PROVIDED = "Long LT - ESD Provided"
    AWAITING_COLLECTION_DETAILS = "Awaiting Collection Details"
    READY_FOR_COLLECTION_FROM_SUPPLIER = "Ready for Collection from Supplier"
    AWAITING_AWB_FROM_FF = "Awaiting AWB from FF"
    AWB_SHARED_TO_SUPPLIER = "AWB Shared to Supplier"
    TRANSIT_TO_UAE = "Transit to UAE"
    NEED_TO_COLLECT = "Need to Collect"
    RECEIVED_IN_UAE = "Received in UAE"
    HOLD = "Hold"
    ISSUE = "Issue"
    READY_FOR_DISPATCH = "Ready for Dispatch"
    DELIVERED = "Delivered"


class PaymentTerm(str, Enum):
    PREPAY = "PREPAY"
    NET_7 = "NET 7"
    NET_30 = "NET 30"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    AED = "AED"
    INR = "INR"


class YesNo(str, Enum):
    YES = "Yes"
    NO = "No"


class JoinOperator(str, Enum):
    AND = "and"
    OR = "or"


class FilterFlag(str, Enum):
    """Which filter UI produced the request; both select advanced mode."""
    ADVANCED_FILTERS = "advancedFilters"
    COMMAND_FILTERS = "commandFilters"


class FilterVariant(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    RANGE = "range"
    DATE = "date"
    DATE_RANGE = "dateRange"
    SELECT = "select"
    MULTI_SELECT = "multiSelect"
    BOOLEAN = "boolean"


class FilterOperator(str, Enum):
    ILIKE = "iLike"
    NOT_ILIKE = "notILike"
    EQ = "eq"
    NE = "ne"
    IN_ARRAY = "inArray"
    NOT_IN_ARRAY = "notInArray"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IS_BETWEEN = "isBetween"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
