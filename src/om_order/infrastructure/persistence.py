# src/om_order/infrastructure/persistence.py
"""OrderRepository — SQLAlchemy Core persistence implementation.

Filter predicates and sort keys come from the domain compiler and are
rendered by sql_filters; nothing here accepts raw column names from callers.
"""
from dataclasses import asdict
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_order.domain.fields import DEFAULT_SORT, SortKey
from src.om_order.domain.filters import Predicate
from src.om_order.domain.models import Order
from src.om_order.infrastructure.sql_filters import (
    orders_table,
    render_predicate,
    render_sort,
)

_c = orders_table.c

# Serializes writers (create/delete/seed compute serials from max(sn));
# plain readers are not blocked.
_LOCK_ORDERS_SQL = text("LOCK TABLE orders IN SHARE ROW EXCLUSIVE MODE")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        sn=row.sn,
        part_number=row.part_number,
        description=row.description,
        qty=row.qty,
        po_date=row.po_date,
        term=row.term,
        customer=row.customer,
        cust_po=row.cust_po,
        status=row.status,
        remarks=row.remarks,
        currency=row.currency,
        po_value=row.po_value,
        costs=row.costs,
        customs_duty=row.customs_duty,
        freight_cost=row.freight_cost,
        gross_profit=row.gross_profit,
        net_profit=row.net_profit,
        profit_percent=row.profit_percent,
        profit_percent_after_cost=row.profit_percent_after_cost,
        payment_received=row.payment_received,
        investor_paid=row.investor_paid,
        target_date=row.target_date,
        dispatch_date=row.dispatch_date,
        supplier=row.supplier,
        supplier_po=row.supplier_po,
        supplier_po_date=row.supplier_po_date,
        awb_to_uae=row.awb_to_uae,
        stability=row.stability,
        last_edited=row.last_edited,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _order_to_values(order: Order) -> dict[str, Any]:
    values = asdict(order)
    # Let the server default fill timestamps the caller did not set
    for key in ("created_at", "updated_at"):
        if values[key] is None:
            del values[key]
    return values


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol."""

    async def query(
        self,
        db: AsyncSession,
        predicate: Predicate,
        sort: tuple[SortKey, ...],
        limit: int,
        offset: int,
    ) -> tuple[list[Order], int]:
        where = render_predicate(predicate)
        rows_stmt = (
            select(orders_table)
            .where(where)
            .order_by(*render_sort(sort))
            .limit(limit)
            .offset(offset)
        )
        count_stmt = select(func.count()).select_from(orders_table).where(where)

        rows = (await db.execute(rows_stmt)).fetchall()
        total = (await db.execute(count_stmt)).scalar_one()
        return [_row_to_order(r) for r in rows], int(total)

    async def get_by_sn(self, db: AsyncSession, sn: int) -> Order | None:
        result = await db.execute(select(orders_table).where(_c.sn == sn))
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_many(self, db: AsyncSession, sns: list[int]) -> list[Order]:
        if not sns:
            return []
        result = await db.execute(
            select(orders_table).where(_c.sn.in_(sns)).order_by(_c.sn)
        )
        return [_row_to_order(r) for r in result.fetchall()]

    async def list_all(self, db: AsyncSession) -> list[Order]:
        result = await db.execute(
            select(orders_table).order_by(*render_sort(DEFAULT_SORT))
        )
        return [_row_to_order(r) for r in result.fetchall()]

    async def list_by_customer(self, db: AsyncSession, customer: str) -> list[Order]:
        result = await db.execute(
            select(orders_table)
            .where(_c.customer == customer)
            .order_by(_c.po_date.asc(), _c.sn.asc())
        )
        return [_row_to_order(r) for r in result.fetchall()]

    async def lock_for_write(self, db: AsyncSession) -> None:
        await db.execute(_LOCK_ORDERS_SQL)

    async def max_sn(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.max(_c.sn)))
        return result.scalar_one_or_none() or 0

    async def oldest_sn(self, db: AsyncSession, exclude_sn: int) -> int | None:
        result = await db.execute(
            select(_c.sn)
            .where(_c.sn != exclude_sn)
            .order_by(_c.created_at.asc(), _c.sn.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, db: AsyncSession, orders: list[Order]) -> None:
        for order in orders:
            await db.execute(insert(orders_table).values(**_order_to_values(order)))

    async def update(self, db: AsyncSession, order: Order) -> None:
        values = _order_to_values(order)
        sn = values.pop("sn")
        values.pop("created_at", None)
        await db.execute(update(orders_table).where(_c.sn == sn).values(**values))

    async def update_many(
        self, db: AsyncSession, sns: list[int], values: dict[str, Any]
    ) -> int:
        result = await db.execute(
            update(orders_table).where(_c.sn.in_(sns)).values(**values)
        )
        return result.rowcount

    async def delete(self, db: AsyncSession, sns: list[int]) -> int:
        if not sns:
            return 0
        result = await db.execute(delete(orders_table).where(_c.sn.in_(sns)))
        return result.rowcount

    async def delete_all(self, db: AsyncSession) -> None:
        await db.execute(delete(orders_table))

    async def count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(orders_table))
        return int(result.scalar_one())

    async def status_counts(self, db: AsyncSession) -> dict[str, int]:
        result = await db.execute(
            select(_c.status, func.count().label("cnt")).group_by(_c.status)
        )
        return {row.status: int(row.cnt) for row in result.fetchall() if row.cnt > 0}

    async def customer_counts(self, db: AsyncSession) -> dict[str, int]:
        result = await db.execute(
            select(_c.customer, func.count().label("cnt")).group_by(_c.customer)
        )
        return {row.customer: int(row.cnt) for row in result.fetchall() if row.cnt > 0}

    async def po_value_range(
        self, db: AsyncSession
    ) -> tuple[Decimal | None, Decimal | None]:
        result = await db.execute(
            select(func.min(_c.po_value).label("lo"), func.max(_c.po_value).label("hi"))
        )
        row = result.fetchone()
        if row is None:
            return None, None
        return row.lo, row.hi
