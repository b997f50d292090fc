"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.logging_config import configure_logging
from config.settings import settings
from src.om_common.database import engine
from src.om_common.errors import AppError, ValidationError
from src.om_common.redis_client import close_redis, ping_redis
from src.om_common.response import error_response
from src.om_customer.api.router import router as customer_router
from src.om_gateway.middleware.request_log import RequestLogMiddleware
from src.om_order.api.router import overview_router
from src.om_order.api.router import router as order_router

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (and Redis when it backs the cache). Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.CACHE_BACKEND == "redis":
        await ping_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
    location = ".".join(str(part) for part in first["loc"]) or "body"
    return _error_json(request, ValidationError(f"{location}: {first['msg']}"))


app.include_router(order_router, prefix="/api/v1")
app.include_router(overview_router, prefix="/api/v1")
app.include_router(customer_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
