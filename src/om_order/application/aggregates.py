# src/om_order/application/aggregates.py
"""Population-wide aggregates for the filter UI.

These always describe the whole table; the list view's filters never apply.
Results are cached for AGGREGATE_CACHE_TTL_SECONDS under a key equal to their
invalidation tag, and a failed query degrades to an empty aggregate.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.cache import CacheService, get_cache
from src.om_common.query_failures import classify_query_failure
from src.om_order.application.cache_tags import (
    CUSTOMER_COUNTS,
    PO_VALUE_RANGE,
    STATUS_COUNTS,
)
from src.om_order.application.schemas import PoValueRange
from src.om_order.domain.repository import OrderRepositoryProtocol
from src.om_order.infrastructure.persistence import OrderRepository


class AggregateService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        cache: CacheService | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._cache = cache

    async def _cache_service(self) -> CacheService:
        if self._cache is None:
            self._cache = await get_cache()
        return self._cache

    async def _cached(self, tag: str, compute) -> Any:
        cache = await self._cache_service()
        return await cache.memoize(
            tag, settings.AGGREGATE_CACHE_TTL_SECONDS, [tag], compute
        )

    async def status_counts(self, db: AsyncSession) -> dict[str, int]:
        """Orders per status; statuses with no orders are omitted."""

        async def load() -> dict[str, int]:
            try:
                async with db.begin():
                    return await self._repo.status_counts(db)
            except Exception as exc:
                classify_query_failure("status_counts", exc)
                return {}

        return await self._cached(STATUS_COUNTS, load)

    async def customer_counts(self, db: AsyncSession) -> dict[str, int]:
        """Orders per customer name."""

        async def load() -> dict[str, int]:
            try:
                async with db.begin():
                    return await self._repo.customer_counts(db)
            except Exception as exc:
                classify_query_failure("customer_counts", exc)
                return {}

        return await self._cached(CUSTOMER_COUNTS, load)

    async def po_value_range(self, db: AsyncSession) -> PoValueRange:
        """Min and max PO value; {0, 0} for an empty table."""

        async def load() -> dict[str, Any]:
            try:
                async with db.begin():
                    lo, hi = await self._repo.po_value_range(db)
            except Exception as exc:
                classify_query_failure("po_value_range", exc)
                lo = hi = None
            return PoValueRange(
                min=lo if lo is not None else Decimal(0),
                max=hi if hi is not None else Decimal(0),
            ).model_dump(mode="json")

        return PoValueRange.model_validate(await self._cached(PO_VALUE_RANGE, load))
