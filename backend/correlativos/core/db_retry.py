"""Helpers for retrying transient database failures (deadlock / lock wait)."""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.core.config import settings

T = TypeVar("T")
MYSQL_RETRIABLE_ERROR_CODES = {1205, 1213}
# serialization_failure, deadlock_detected, lock_not_available
RETRIABLE_SQLSTATES = {"40001", "40P01", "55P03"}
RETRIABLE_MESSAGES = (
    "deadlock",
    "lock wait timeout",
    "could not serialize",
    "database is locked",
)


class SequenceContention(Exception):
    """Raised when a concurrent writer won a race on a sequence row."""


def _extract_error_code(exc: DBAPIError) -> tuple[int | None, str | None]:
    orig = getattr(exc, "orig", None)
    if not orig:
        return None, None
    code = None
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if hasattr(orig, "args") and orig.args:
        try:
            code = int(orig.args[0])
        except (TypeError, ValueError):
            code = None
    return code, sqlstate


def is_retriable_error(exc: BaseException) -> bool:
    """Return True when ``exc`` is worth retrying in a fresh transaction."""

    if isinstance(exc, SequenceContention):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    code, sqlstate = _extract_error_code(exc)
    if code in MYSQL_RETRIABLE_ERROR_CODES:
        return True
    if sqlstate in RETRIABLE_SQLSTATES:
        return True
    message = str(getattr(exc, "orig", exc)).lower()
    return any(token in message for token in RETRIABLE_MESSAGES)


async def with_db_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    base_delay: float | None = None,
    jitter: float | None = None,
) -> T:
    """Run the async operation with deadlock/timeout retries and jitter.

    The last error is re-raised once ``attempts`` are used up; callers use
    :func:`is_retriable_error` to tell exhaustion apart from a hard failure.
    """

    attempts = attempts or settings.DB_RETRY_ATTEMPTS
    base_delay = base_delay if base_delay is not None else settings.DB_RETRY_BASE_DELAY
    jitter = jitter if jitter is not None else settings.DB_RETRY_JITTER
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except (DBAPIError, SequenceContention) as exc:
            if not is_retriable_error(exc):
                raise
            last_error = exc
            await session.rollback()
            if attempt == attempts:
                break
            sleep_for = base_delay * (2 ** (attempt - 1)) + random.uniform(0, jitter)
            logger.bind(
                attempt=attempt,
                max_attempts=attempts,
                sleep=sleep_for,
                error=str(exc),
            ).warning("db_retry_deadlock")
            await asyncio.sleep(sleep_for)
    if last_error is not None:
        raise last_error
    raise RuntimeError("Operation failed without raising an exception")
