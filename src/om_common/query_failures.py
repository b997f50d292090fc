"""Classification of swallowed read-path failures.

List views and aggregates degrade to empty results instead of raising. Every
such degradation goes through `classify_query_failure`, which logs the cause
so "no matches" and "query failed" stay distinguishable in the logs even though
callers receive the same empty payload.
"""

import asyncio
import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("om.query")


class QueryFailureKind(str, Enum):
    DATABASE = "database"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


def classify_query_failure(operation: str, exc: BaseException) -> QueryFailureKind:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        kind = QueryFailureKind.TIMEOUT
    elif isinstance(exc, SQLAlchemyError):
        kind = QueryFailureKind.DATABASE
    else:
        kind = QueryFailureKind.UNEXPECTED
    logger.warning(
        "Query degraded to empty result: op=%s kind=%s error=%r",
        operation,
        kind.value,
        exc,
    )
    return kind
