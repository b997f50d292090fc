"""CustomerRepository — SQLAlchemy Core persistence implementation."""
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_customer.domain.models import Customer, CustomerSummary, name_key
from src.om_customer.infrastructure.db_models import CustomerORM
from src.om_order.infrastructure.db_models import OrderORM

customers_table = CustomerORM.__table__
_c = customers_table.c
_orders = OrderORM.__table__

_NAME_KEY = func.lower(func.trim(_c.name))


def _row_to_customer(row: Any) -> Customer:
    return Customer(
        id=row.id,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class CustomerRepository:
    """Concrete implementation of CustomerRepositoryProtocol."""

    async def list_with_order_counts(self, db: AsyncSession) -> list[CustomerSummary]:
        stmt = (
            select(
                _c.id,
                _c.name,
                _c.created_at,
                _c.updated_at,
                func.count(_orders.c.sn).label("order_count"),
            )
            .select_from(
                customers_table.outerjoin(_orders, _orders.c.customer == _c.name)
            )
            .group_by(_c.id)
            .order_by(_c.name.asc())
        )
        result = await db.execute(stmt)
        return [
            CustomerSummary(
                id=row.id,
                name=row.name,
                order_count=int(row.order_count),
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in result.fetchall()
        ]

    async def list_for_dropdown(self, db: AsyncSession) -> list[Customer]:
        result = await db.execute(select(customers_table).order_by(_c.name.asc()))
        return [_row_to_customer(r) for r in result.fetchall()]

    async def get_by_id(self, db: AsyncSession, customer_id: int) -> Customer | None:
        result = await db.execute(select(customers_table).where(_c.id == customer_id))
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def get_by_name(self, db: AsyncSession, name: str) -> Customer | None:
        result = await db.execute(
            select(customers_table).where(_c.name == name).limit(1)
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: int | None = None
    ) -> bool:
        stmt = select(_c.id).where(_NAME_KEY == name_key(name)).limit(1)
        if exclude_id is not None:
            stmt = stmt.where(_c.id != exclude_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def insert(self, db: AsyncSession, name: str, now: datetime) -> Customer:
        result = await db.execute(
            insert(customers_table)
            .values(name=name, created_at=now, updated_at=now)
            .returning(_c.id)
        )
        return Customer(
            id=result.scalar_one(), name=name, created_at=now, updated_at=now
        )

    async def rename(
        self, db: AsyncSession, customer_id: int, name: str, now: datetime
    ) -> None:
        await db.execute(
            update(customers_table)
            .where(_c.id == customer_id)
            .values(name=name, updated_at=now)
        )

    async def delete(self, db: AsyncSession, customer_id: int) -> int:
        result = await db.execute(delete(customers_table).where(_c.id == customer_id))
        return result.rowcount

    async def distinct_order_customers(self, db: AsyncSession) -> list[str]:
        result = await db.execute(
            select(_orders.c.customer).distinct().order_by(_orders.c.customer)
        )
        return [row.customer for row in result.fetchall()]
