"""Pydantic schemas for the customer API."""
from datetime import datetime

from pydantic import BaseModel, field_validator

from src.om_customer.domain.models import (
    MAX_NAME_LENGTH,
    Customer,
    CustomerSummary,
    normalize_name,
)


class CustomerNameRequest(BaseModel):
    """Body of create and rename; the name arrives already normalized."""

    name: str

    @field_validator("name")
    @classmethod
    def normalized_name(cls, v: str) -> str:
        v = normalize_name(v)
        if not v:
            raise ValueError("Customer name is required")
        if len(v) > MAX_NAME_LENGTH:
            raise ValueError(
                f"Customer name must be at most {MAX_NAME_LENGTH} characters"
            )
        return v


class CustomerResponse(BaseModel):
    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            id=customer.id,
            name=customer.name,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
        )


class CustomerSummaryResponse(CustomerResponse):
    order_count: int

    @classmethod
    def from_summary(cls, summary: CustomerSummary) -> "CustomerSummaryResponse":
        return cls(
            id=summary.id,
            name=summary.name,
            order_count=summary.order_count,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class CustomerOption(BaseModel):
    id: int
    name: str
