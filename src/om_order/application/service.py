# src/om_order/application/service.py
"""OrderApplicationService — order queries and the fixed-population lifecycle.

Reads:
  get_orders        compile filters + sort, fetch rows and count in one
                    transaction, memoize for ORDER_QUERY_CACHE_TTL_SECONDS.
                    Execution failures degrade to an empty page.
  get_order_by_slug "{sn}-{custPo}-{partNumber}" → order or None.

Writes (each returns a MutationResult, never raises):
  create        insert max(sn)+1, evict the oldest other order; fails on an
                empty table
  update        partial merge, re-derive profit when a monetary input changes
  bulk update   status / payment_received / investor_paid on many orders
  delete        remove, then insert the same number of random replacements
  seed          wipe and regenerate the demo population

Every read-then-write sequence runs inside a single `async with db.begin()`;
cache tags are invalidated only after the transaction commits.
"""

import logging
import math
import random
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.cache import CacheService, get_cache
from src.om_common.datetime_utils import utc_now
from src.om_common.errors import (
    NoOrderToEvictError,
    OrderNotFoundError,
    ValidationError,
)
from src.om_common.mutations import Tags, run_mutation, validate_payload
from src.om_common.query_failures import classify_query_failure
from src.om_common.response import MutationResult
from src.om_order.application.cache_tags import (
    ORDERS,
    POPULATION_CHANGE_TAGS,
    query_key,
    slug_key,
    update_tags,
)
from src.om_order.application.schemas import (
    BulkDeleteOrdersRequest,
    BulkUpdateOrdersRequest,
    CreateOrderRequest,
    GetOrdersRequest,
    OrderListResponse,
    OrderResponse,
    UpdateOrderRequest,
)
from src.om_order.domain.fields import compile_sort
from src.om_order.domain.filters import Predicate, compile_basic, compile_filters
from src.om_order.domain.generator import generate_random_order
from src.om_order.domain.models import MONETARY_FIELDS, Order
from src.om_order.domain.profit import apply_profit
from src.om_order.domain.repository import OrderRepositoryProtocol
from src.om_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


def compile_request(request: GetOrdersRequest) -> Predicate:
    """Advanced clauses when a filter flag is set, basic fields otherwise."""
    if request.advanced:
        return compile_filters(
            [clause.to_domain() for clause in request.filters],
            request.join_operator,
        )
    return compile_basic(request.basic_filters())


def parse_slug(slug: str) -> int | None:
    parts = slug.split("-")
    if len(parts) < 3:
        return None
    try:
        return int(parts[0])
    except ValueError:
        return None


class OrderApplicationService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        cache: CacheService | None = None,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._cache = cache
        self._clock = clock
        self._rng = rng or random.Random()

    async def _cache_service(self) -> CacheService:
        if self._cache is None:
            self._cache = await get_cache()
        return self._cache

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_orders(
        self, db: AsyncSession, request: GetOrdersRequest
    ) -> OrderListResponse:
        # Compilation errors are caller mistakes and propagate
        predicate = compile_request(request)
        sort = compile_sort(request.sort_pairs())

        async def load() -> dict[str, Any]:
            try:
                async with db.begin():
                    orders, total = await self._repo.query(
                        db, predicate, sort, request.per_page, request.offset
                    )
            except Exception as exc:
                classify_query_failure("get_orders", exc)
                return OrderListResponse(data=[], page_count=0).model_dump(mode="json")
            page = OrderListResponse(
                data=[OrderResponse.from_domain(o) for o in orders],
                page_count=math.ceil(total / request.per_page),
            )
            return page.model_dump(mode="json")

        cache = await self._cache_service()
        payload = await cache.memoize(
            query_key(request.model_dump_json()),
            settings.ORDER_QUERY_CACHE_TTL_SECONDS,
            [ORDERS],
            load,
        )
        return OrderListResponse.model_validate(payload)

    async def get_order_by_slug(
        self, db: AsyncSession, slug: str
    ) -> OrderResponse | None:
        sn = parse_slug(slug)
        if sn is None:
            return None

        async def load() -> dict[str, Any] | None:
            try:
                async with db.begin():
                    order = await self._repo.get_by_sn(db, sn)
            except Exception as exc:
                classify_query_failure("get_order_by_slug", exc)
                return None
            return OrderResponse.from_domain(order).model_dump(mode="json") if order else None

        cache = await self._cache_service()
        payload = await cache.memoize(
            slug_key(slug), settings.ORDER_DETAIL_CACHE_TTL_SECONDS, [ORDERS], load
        )
        return OrderResponse.model_validate(payload) if payload is not None else None

    async def list_all_orders(self, db: AsyncSession) -> list[Order]:
        """Whole population, for dashboards that compute in-process."""
        try:
            async with db.begin():
                return await self._repo.list_all(db)
        except Exception as exc:
            classify_query_failure("list_all_orders", exc)
            return []

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, payload: CreateOrderRequest | Mapping[str, Any]
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(CreateOrderRequest, payload)
            now = self._clock()
            async with db.begin():
                await self._repo.lock_for_write(db)
                sn = await self._repo.max_sn(db) + 1
                order = apply_profit(
                    Order(
                        sn=sn,
                        **req.model_dump(),
                        last_edited=now,
                        created_at=now,
                        updated_at=now,
                    )
                )
                await self._repo.insert(db, [order])
                evicted = await self._repo.oldest_sn(db, exclude_sn=sn)
                if evicted is None:
                    raise NoOrderToEvictError()
                await self._repo.delete(db, [evicted])
            logger.info("Order created: sn=%d evicted=%d", sn, evicted)
            return POPULATION_CHANGE_TAGS

        return await run_mutation("create_order", work, self._cache_service)

    async def update_order(
        self,
        db: AsyncSession,
        sn: int,
        payload: UpdateOrderRequest | Mapping[str, Any],
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(UpdateOrderRequest, payload)
            changes = req.changes()
            now = self._clock()
            async with db.begin():
                current = await self._repo.get_by_sn(db, sn)
                if current is None:
                    raise OrderNotFoundError(sn)
                order = replace(current, **changes, last_edited=now, updated_at=now)
                if MONETARY_FIELDS & changes.keys() or order.gross_profit is None:
                    apply_profit(order)
                await self._repo.update(db, order)
            logger.info("Order updated: sn=%d fields=%s", sn, sorted(changes))
            return update_tags(status_changed="status" in changes)

        return await run_mutation("update_order", work, self._cache_service)

    async def bulk_update_orders(
        self, db: AsyncSession, payload: BulkUpdateOrdersRequest | Mapping[str, Any]
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(BulkUpdateOrdersRequest, payload)
            sns = sorted(set(req.sns))
            changes = req.changes()
            now = self._clock()
            async with db.begin():
                found = {o.sn for o in await self._repo.get_many(db, sns)}
                missing = [sn for sn in sns if sn not in found]
                if missing:
                    raise OrderNotFoundError(missing)
                updated = await self._repo.update_many(
                    db, sns, {**changes, "last_edited": now, "updated_at": now}
                )
                # A row deleted after the existence check rolls the batch back
                if updated != len(sns):
                    raise OrderNotFoundError(sns)
            logger.info("Orders updated: count=%d fields=%s", len(sns), sorted(changes))
            return update_tags(status_changed="status" in changes)

        return await run_mutation("bulk_update_orders", work, self._cache_service)

    async def delete_order(self, db: AsyncSession, sn: int) -> MutationResult:
        async def work() -> Tags:
            await self._delete_and_replace(db, [sn])
            return POPULATION_CHANGE_TAGS

        return await run_mutation("delete_order", work, self._cache_service)

    async def bulk_delete_orders(
        self, db: AsyncSession, payload: BulkDeleteOrdersRequest | Mapping[str, Any]
    ) -> MutationResult:
        async def work() -> Tags:
            req = validate_payload(BulkDeleteOrdersRequest, payload)
            await self._delete_and_replace(db, sorted(set(req.sns)))
            return POPULATION_CHANGE_TAGS

        return await run_mutation("bulk_delete_orders", work, self._cache_service)

    async def _delete_and_replace(self, db: AsyncSession, sns: list[int]) -> None:
        now = self._clock()
        async with db.begin():
            await self._repo.lock_for_write(db)
            found = {o.sn for o in await self._repo.get_many(db, sns)}
            missing = [sn for sn in sns if sn not in found]
            if missing:
                raise OrderNotFoundError(missing)
            await self._repo.delete(db, sns)
            next_sn = await self._repo.max_sn(db) + 1
            replacements = [
                generate_random_order(next_sn + i, self._rng, now)
                for i in range(len(sns))
            ]
            await self._repo.insert(db, replacements)
        logger.info(
            "Orders deleted: sns=%s replacements=%s",
            sns,
            [o.sn for o in replacements],
        )

    async def seed_orders(self, db: AsyncSession, count: int) -> MutationResult:
        async def work() -> Tags:
            if count < 1:
                raise ValidationError("count must be at least 1")
            now = self._clock()
            async with db.begin():
                await self._repo.lock_for_write(db)
                await self._repo.delete_all(db)
                await self._repo.insert(
                    db,
                    [
                        generate_random_order(sn, self._rng, now)
                        for sn in range(1, count + 1)
                    ],
                )
            logger.info("Orders seeded: count=%d", count)
            return POPULATION_CHANGE_TAGS

        return await run_mutation("seed_orders", work, self._cache_service)
