"""Shared plumbing for write operations.

Mutations report failure in their result instead of raising:
  AppError          → its message (validation, not found, conflict)
  anything else     → logged with traceback, generic PersistenceError message
Cache tags returned by the work coroutine are invalidated only on success.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.om_common.cache import CacheService
from src.om_common.errors import AppError, PersistenceError, ValidationError
from src.om_common.response import MutationResult

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Tags = tuple[str, ...]


def validate_payload(model: type[M], payload: M | Mapping[str, Any]) -> M:
    """Accept an already-built model or validate a raw mapping into one."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "body"
        raise ValidationError(f"{location}: {first['msg']}") from None


async def run_mutation(
    operation: str,
    work: Callable[[], Awaitable[Tags]],
    cache: Callable[[], Awaitable[CacheService]],
) -> MutationResult:
    try:
        tags = await work()
    except AppError as exc:
        logger.info("%s rejected: %s", operation, exc.message)
        return MutationResult.failure(exc.message)
    except Exception:
        logger.exception("%s failed", operation)
        return MutationResult.failure(PersistenceError().message)
    if tags:
        await (await cache()).invalidate_tags(*tags)
    return MutationResult.success()
