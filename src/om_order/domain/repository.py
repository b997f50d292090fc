# src/om_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer.

Callers own the transaction (`async with db.begin()`); repository methods only
execute statements inside it.
"""
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_order.domain.fields import SortKey
from src.om_order.domain.filters import Predicate
from src.om_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def query(
        self,
        db: AsyncSession,
        predicate: Predicate,
        sort: tuple[SortKey, ...],
        limit: int,
        offset: int,
    ) -> tuple[list[Order], int]: ...

    async def get_by_sn(self, db: AsyncSession, sn: int) -> Order | None: ...

    async def get_many(self, db: AsyncSession, sns: list[int]) -> list[Order]: ...

    async def list_all(self, db: AsyncSession) -> list[Order]: ...

    async def list_by_customer(self, db: AsyncSession, customer: str) -> list[Order]: ...

    async def lock_for_write(self, db: AsyncSession) -> None: ...

    async def max_sn(self, db: AsyncSession) -> int: ...

    async def oldest_sn(self, db: AsyncSession, exclude_sn: int) -> int | None: ...

    async def insert(self, db: AsyncSession, orders: list[Order]) -> None: ...

    async def update(self, db: AsyncSession, order: Order) -> None: ...

    async def update_many(
        self, db: AsyncSession, sns: list[int], values: dict[str, Any]
    ) -> int: ...

    async def delete(self, db: AsyncSession, sns: list[int]) -> int: ...

    async def delete_all(self, db: AsyncSession) -> None: ...

    async def count(self, db: AsyncSession) -> int: ...

    async def status_counts(self, db: AsyncSession) -> dict[str, int]: ...

    async def customer_counts(self, db: AsyncSession) -> dict[str, int]: ...

    async def po_value_range(
        self, db: AsyncSession
    ) -> tuple[Decimal | None, Decimal | None]: ...
