"""Unified API response wrappers.

Read endpoints return the envelope:
{
    "code": 0,           // 0=success, non-0=error code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."
}

Mutations return a MutationResult instead: `{"data": null, "error": null}` on
success and `{"data": null, "error": "<message>"}` on failure. Mutation
failures are reported in the body, not raised.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


class MutationResult(BaseModel):
    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls) -> "MutationResult":
        return cls(data=None, error=None)

    @classmethod
    def failure(cls, message: str) -> "MutationResult":
        return cls(data=None, error=message)


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)
