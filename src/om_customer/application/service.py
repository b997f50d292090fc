"""CustomerApplicationService — customer directory reads and edits.

Names are unique case-insensitively (after trimming and whitespace collapse).
A customer's orders are matched by exact name; renaming a customer does not
rewrite orders.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.cache import CacheService, get_cache
from src.om_common.datetime_utils import utc_now
from src.om_common.errors import CustomerNotFoundError, DuplicateCustomerError
from src.om_common.mutations import Tags, run_mutation, validate_payload
from src.om_common.query_failures import classify_query_failure
from src.om_common.response import MutationResult
from src.om_customer.application.schemas import (
    CustomerNameRequest,
    CustomerOption,
    CustomerResponse,
    CustomerSummaryResponse,
)
from src.om_customer.domain.models import name_key, normalize_name
from src.om_customer.domain.repository import CustomerRepositoryProtocol
from src.om_customer.infrastructure.persistence import CustomerRepository
from src.om_order.application.cache_tags import ORDERS
from src.om_order.application.schemas import OrderResponse
from src.om_order.domain.repository import OrderRepositoryProtocol
from src.om_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

CUSTOMERS = "customers"
CUSTOMERS_LIST = "customers-list"
CUSTOMERS_DROPDOWN = "customers-dropdown"

DIRECTORY_TAGS = (CUSTOMERS, CUSTOMERS_LIST, CUSTOMERS_DROPDOWN)


def customer_key(name: str) -> str:
    return f"customer-{name}"


def customer_orders_key(name: str) -> str:
    return f"customer-orders-{name}"


class CustomerApplicationService:
    def __init__(
        self,
        repo: CustomerRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        cache: CacheService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: CustomerRepositoryProtocol = repo or CustomerRepository()
        self._order_repo: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._cache = cache
        self._clock = clock

    async def _cache_service(self) -> CacheService:
        if self._cache is None:
            self._cache = await get_cache()
        return self._cache

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_customers(self, db: AsyncSession) -> list[CustomerSummaryResponse]:
        """All customers by name, each with the number of orders under that name."""

        async def load() -> list[dict[str, Any]]:
            try:
                async with db.begin():
                    rows = await self._repo.list_with_order_counts(db)
            except Exception as exc:
                classify_query_failure("list_customers", exc)
                return []
            return [
                CustomerSummaryResponse.from_summary(r).model_dump(mode="json")
                for r in rows
            ]

        cache = await self._cache_service()
        payload = await cache.memoize(
            CUSTOMERS_LIST,
            settings.CUSTOMER_CACHE_TTL_SECONDS,
            [CUSTOMERS, CUSTOMERS_LIST],
            load,
        )
        return [CustomerSummaryResponse.model_validate(p) for p in payload]

    async def get_customer_by_name(
        self, db: AsyncSession, name: str
    ) -> CustomerResponse | None:
        async def load() -> dict[str, Any] | None:
            try:
                async with db.begin():
                    customer = await self._repo.get_by_name(db, name)
            except Exception as exc:
                classify_query_failure("get_customer_by_name", exc)
                return None
            if customer is None:
                return None
            return CustomerResponse.from_domain(customer).model_dump(mode="json")

        cache = await self._cache_service()
        payload = await cache.memoize(
            customer_key(name),
            settings.CUSTOMER_CACHE_TTL_SECONDS,
            [CUSTOMERS, customer_key(name)],
            load,
        )
        return CustomerResponse.model_validate(payload) if payload is not None else None

    async def get_customer_orders(
        self, db: AsyncSession, name: str
    ) -> list[OrderResponse]:
        """Orders placed under `name`, oldest PO date first."""

        async def load() -> list[dict[str, Any]]:
            try:
                async with db.begin():
                    orders = await self._order_repo.list_by_customer(db, name)
            except Exception as exc:
                classify_query_failure("get_customer_orders", exc)
                return []
            return [OrderResponse.from_domain(o).model_dump(mode="json") for o in orders]

        cache = await self._cache_service()
        payload = await cache.memoize(
            customer_orders_key(name),
            settings.CUSTOMER_CACHE_TTL_SECONDS,
            [ORDERS, CUSTOMERS, customer_orders_key(name)],
            load,
        )
        return [OrderResponse.model_validate(p) for p in payload]

    async def get_dropdown(self, db: AsyncSession) -> list[CustomerOption]:
        async def load() -> list[dict[str, Any]]:
            try:
                async with db.begin():
                    customers = await self._repo.list_for_dropdown(db)
            except Exception as exc:
                classify_query_failure("get_dropdown", exc)
                return []
            return [{"id": c.id, "name": c.name} for c in customers]

        cache = await self._cache_service()
        payload = await cache.memoize(
            CUSTOMERS_DROPDOWN,
            settings.CUSTOMER_DROPDOWN_CACHE_TTL_SECONDS,
            [CUSTOMERS, CUSTOMERS_DROPDOWN],
            load,
        )
        return [CustomerOption.model_validate(p) for p in payload]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_customer(
        self, db: AsyncSession, payload: CustomerNameRequest | Mapping[str, Any]
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(CustomerNameRequest, payload)
            async with db.begin():
                if await self._repo.name_taken(db, req.name):
                    raise DuplicateCustomerError()
                customer = await self._repo.insert(db, req.name, self._clock())
            logger.info("Customer created: id=%d name=%s", customer.id, customer.name)
            return DIRECTORY_TAGS

        return await run_mutation("create_customer", work, self._cache_service)

    async def rename_customer(
        self,
        db: AsyncSession,
        customer_id: int,
        payload: CustomerNameRequest | Mapping[str, Any],
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(CustomerNameRequest, payload)
            async with db.begin():
                current = await self._repo.get_by_id(db, customer_id)
                if current is None:
                    raise CustomerNotFoundError()
                if await self._repo.name_taken(db, req.name, exclude_id=customer_id):
                    raise DuplicateCustomerError()
                await self._repo.rename(db, customer_id, req.name, self._clock())
            logger.info(
                "Customer renamed: id=%d from=%s to=%s",
                customer_id,
                current.name,
                req.name,
            )
            return DIRECTORY_TAGS + (
                customer_key(current.name),
                customer_orders_key(current.name),
            )

        return await run_mutation("rename_customer", work, self._cache_service)

    async def delete_customer(self, db: AsyncSession, customer_id: int) -> MutationResult:
        async def work() -> Tags:
            async with db.begin():
                current = await self._repo.get_by_id(db, customer_id)
                if current is None:
                    raise CustomerNotFoundError()
                await self._repo.delete(db, customer_id)
            logger.info("Customer deleted: id=%d name=%s", customer_id, current.name)
            return DIRECTORY_TAGS + (
                customer_key(current.name),
                customer_orders_key(current.name),
            )

        return await run_mutation("delete_customer", work, self._cache_service)

    async def populate_from_orders(self, db: AsyncSession) -> MutationResult:
        """Add a customer for every distinct order customer name not yet listed."""

        async def work() -> Tags:
            added: list[str] = []
            now = self._clock()
            async with db.begin():
                seen: set[str] = set()
                for raw in await self._repo.distinct_order_customers(db):
                    name = normalize_name(raw)
                    if not name or name_key(name) in seen:
                        continue
                    seen.add(name_key(name))
                    if await self._repo.name_taken(db, name):
                        continue
                    await self._repo.insert(db, name, now)
                    added.append(name)
            logger.info("Customers populated from orders: added=%s", added)
            return DIRECTORY_TAGS if added else ()

        return await run_mutation("populate_from_orders", work, self._cache_service)
