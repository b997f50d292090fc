# src/om_order/infrastructure/db_models.py
"""SQLAlchemy ORM model for the orders table.

The repository builds Core select()/update()/delete() statements against
`OrderORM.__table__`; DDL itself lives in the alembic migrations.
"""
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Integer, Numeric, SmallInteger, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.om_common.database import Base


class OrderORM(Base):
    __tablename__ = "orders"

    sn: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    part_number: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    qty: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    po_date: Mapped[date] = mapped_column(Date, nullable=False)
    term: Mapped[str] = mapped_column(String(10), nullable=False)
    customer: Mapped[str] = mapped_column(String(100), nullable=False)
    cust_po: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(40), nullable=False)
    remarks: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    po_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    costs: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    customs_duty: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    freight_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    gross_profit: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    net_profit: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    profit_percent: Mapped[Decimal | None] = mapped_column(Numeric(9, 2), nullable=True)
    profit_percent_after_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(9, 2), nullable=True
    )
    payment_received: Mapped[str] = mapped_column(String(3), nullable=False)
    investor_paid: Mapped[str] = mapped_column(String(3), nullable=False)
    target_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    dispatch_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    supplier: Mapped[str] = mapped_column(String(100), nullable=False)
    supplier_po: Mapped[str] = mapped_column(String(64), nullable=False)
    supplier_po_date: Mapped[date] = mapped_column(Date, nullable=False)
    awb_to_uae: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    stability: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=10)
    last_edited: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
