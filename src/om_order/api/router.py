"""om_order REST endpoints.

POST   /orders/search                   — filtered, sorted, paginated list
GET    /orders/stats/status-counts      — orders per status (whole table)
GET    /orders/stats/customer-counts    — orders per customer (whole table)
GET    /orders/stats/po-value-range     — min / max PO value
GET    /orders/{slug}                   — single order by "{sn}-{custPo}-{partNumber}"
POST   /orders                          — create (evicts the oldest order)
PATCH  /orders                          — bulk status / payment update
PATCH  /orders/{sn}                     — partial update
DELETE /orders/{sn}                     — delete (inserts a replacement)
POST   /orders/bulk-delete              — delete many (inserts replacements)
POST   /orders/seed                     — regenerate demo data
GET    /overview                        — dashboard KPIs

Mutations answer 200 with a MutationResult body; failures are in `error`.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.database import get_db_session
from src.om_common.errors import NotFoundError
from src.om_common.response import ApiResponse, MutationResult, success_response
from src.om_order.application.aggregates import AggregateService
from src.om_order.application.overview import OverviewService
from src.om_order.application.schemas import GetOrdersRequest
from src.om_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])
overview_router = APIRouter(prefix="/overview", tags=["overview"])

_service = OrderApplicationService()
_aggregates = AggregateService()
_overview = OverviewService(_service)

Db = Annotated[AsyncSession, Depends(get_db_session)]
Payload = Annotated[dict[str, Any], Body()]


def _envelope(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/search")
async def search_orders(
    body: GetOrdersRequest, request: Request, db: Db
) -> ApiResponse:
    result = await _service.get_orders(db, body)
    return _envelope(request, result.model_dump(mode="json"))


@router.get("/stats/status-counts")
async def status_counts(request: Request, db: Db) -> ApiResponse:
    return _envelope(request, await _aggregates.status_counts(db))


@router.get("/stats/customer-counts")
async def customer_counts(request: Request, db: Db) -> ApiResponse:
    return _envelope(request, await _aggregates.customer_counts(db))


@router.get("/stats/po-value-range")
async def po_value_range(request: Request, db: Db) -> ApiResponse:
    result = await _aggregates.po_value_range(db)
    return _envelope(request, result.model_dump(mode="json"))


@router.get("/{slug}")
async def get_order(slug: str, request: Request, db: Db) -> ApiResponse:
    result = await _service.get_order_by_slug(db, slug)
    if result is None:
        raise NotFoundError(f"Order not found: {slug}")
    return _envelope(request, result.model_dump(mode="json"))


@router.post("")
async def create_order(payload: Payload, db: Db) -> MutationResult:
    return await _service.create_order(db, payload)


@router.patch("")
async def bulk_update_orders(payload: Payload, db: Db) -> MutationResult:
    return await _service.bulk_update_orders(db, payload)


@router.patch("/{sn}")
async def update_order(sn: int, payload: Payload, db: Db) -> MutationResult:
    return await _service.update_order(db, sn, payload)


@router.delete("/{sn}")
async def delete_order(sn: int, db: Db) -> MutationResult:
    return await _service.delete_order(db, sn)


@router.post("/bulk-delete")
async def bulk_delete_orders(payload: Payload, db: Db) -> MutationResult:
    return await _service.bulk_delete_orders(db, payload)


@router.post("/seed")
async def seed_orders(
    db: Db,
    count: int = Query(settings.SEED_ORDER_COUNT, ge=1, le=10000),
) -> MutationResult:
    return await _service.seed_orders(db, count)


@overview_router.get("")
async def get_overview(
    request: Request,
    db: Db,
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=2000, le=2100),
) -> ApiResponse:
    result = await _overview.get_overview(db, month=month, year=year)
    return _envelope(request, result.model_dump(mode="json"))
