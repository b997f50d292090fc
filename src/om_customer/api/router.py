"""om_customer REST endpoints.

GET    /customers                     — list with order counts
GET    /customers/dropdown            — id / name pairs for selects
GET    /customers/by-name/{name}      — single customer
GET    /customers/by-name/{name}/orders — that customer's orders by PO date
POST   /customers                     — create
PATCH  /customers/{customer_id}       — rename
DELETE /customers/{customer_id}       — delete
POST   /customers/populate            — add customers found on orders
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.database import get_db_session
from src.om_common.errors import CustomerNotFoundError
from src.om_common.response import ApiResponse, MutationResult, success_response
from src.om_customer.application.service import CustomerApplicationService

router = APIRouter(prefix="/customers", tags=["customers"])

_service = CustomerApplicationService()

Db = Annotated[AsyncSession, Depends(get_db_session)]
Payload = Annotated[dict[str, Any], Body()]


def _envelope(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_customers(request: Request, db: Db) -> ApiResponse:
    result = await _service.list_customers(db)
    return _envelope(request, [c.model_dump(mode="json") for c in result])


@router.get("/dropdown")
async def customer_dropdown(request: Request, db: Db) -> ApiResponse:
    result = await _service.get_dropdown(db)
    return _envelope(request, [c.model_dump() for c in result])


@router.get("/by-name/{name}")
async def get_customer(name: str, request: Request, db: Db) -> ApiResponse:
    result = await _service.get_customer_by_name(db, name)
    if result is None:
        raise CustomerNotFoundError()
    return _envelope(request, result.model_dump(mode="json"))


@router.get("/by-name/{name}/orders")
async def get_customer_orders(name: str, request: Request, db: Db) -> ApiResponse:
    result = await _service.get_customer_orders(db, name)
    return _envelope(request, [o.model_dump(mode="json") for o in result])


@router.post("")
async def create_customer(payload: Payload, db: Db) -> MutationResult:
    return await _service.create_customer(db, payload)


@router.post("/populate")
async def populate_customers(db: Db) -> MutationResult:
    return await _service.populate_from_orders(db)


@router.patch("/{customer_id}")
async def rename_customer(customer_id: int, payload: Payload, db: Db) -> MutationResult:
    return await _service.rename_customer(db, customer_id, payload)


@router.delete("/{customer_id}")
async def delete_customer(customer_id: int, db: Db) -> MutationResult:
    return await _service.delete_customer(db, customer_id)
