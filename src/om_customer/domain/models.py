"""Customer domain model — pure dataclasses, no SQLAlchemy dependency.

Orders reference customers by name only; there is no foreign key, so renaming
or deleting a customer leaves existing orders untouched.
"""
import re
from dataclasses import dataclass
from datetime import datetime

MAX_NAME_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Trim and collapse inner whitespace runs to a single space."""
    return _WHITESPACE.sub(" ", name.strip())


def name_key(name: str) -> str:
    """Case-insensitive identity used for uniqueness checks."""
    return normalize_name(name).lower()


@dataclass
class Customer:
    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CustomerSummary:
    id: int
    name: str
    order_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
