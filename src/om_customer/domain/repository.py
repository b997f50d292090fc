"""CustomerRepository Protocol — interface contract for persistence layer."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_customer.domain.models import Customer, CustomerSummary


class CustomerRepositoryProtocol(Protocol):
    async def list_with_order_counts(self, db: AsyncSession) -> list[CustomerSummary]: ...

    async def list_for_dropdown(self, db: AsyncSession) -> list[Customer]: ...

    async def get_by_id(self, db: AsyncSession, customer_id: int) -> Customer | None: ...

    async def get_by_name(self, db: AsyncSession, name: str) -> Customer | None: ...

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: int | None = None
    ) -> bool: ...

    async def insert(self, db: AsyncSession, name: str, now: datetime) -> Customer: ...

    async def rename(
        self, db: AsyncSession, customer_id: int, name: str, now: datetime
    ) -> None: ...

    async def delete(self, db: AsyncSession, customer_id: int) -> int: ...

    async def distinct_order_customers(self, db: AsyncSession) -> list[str]: ...
