"""Bounded exponential-backoff retry for store operations.

Only transient failures are retried: refused connections, timeouts and
serialization conflicts. Everything else (constraint violations, syntax
errors, ...) propagates on the first attempt.
"""

import asyncio
import errno
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE 40001: serialization_failure
TRANSIENT_SQLSTATES: frozenset[str] = frozenset({"40001"})

TRANSIENT_ERRNOS: frozenset[int] = frozenset({errno.ECONNREFUSED, errno.ETIMEDOUT})


def _sqlstate(error: BaseException) -> str | None:
    for attr in ("sqlstate", "pgcode"):
        value = getattr(error, attr, None)
        if isinstance(value, str):
            return value
    return None


def is_transient_error(error: BaseException) -> bool:
    """Classify an exception raised by a store operation."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))

        if isinstance(current, sa_exc.IntegrityError):
            return False
        if isinstance(current, (ConnectionRefusedError, TimeoutError, sa_exc.TimeoutError)):
            return True
        if isinstance(current, OSError) and current.errno in TRANSIENT_ERRNOS:
            return True
        if isinstance(current, sa_exc.DBAPIError) and current.connection_invalidated:
            return True
        if _sqlstate(current) in TRANSIENT_SQLSTATES:
            return True

        if isinstance(current, sa_exc.DBAPIError) and current.orig is not None:
            current = current.orig
        else:
            current = current.__cause__
    return False


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 0.3,
    is_transient: Callable[[BaseException], bool] = is_transient_error,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``operation()``, retrying transient failures.

    Retries at most ``max_retries`` times, waiting ``base_delay`` seconds
    before the first retry and doubling the wait each time. The last error is
    re-raised unchanged once retries are exhausted.
    """
    retries = 0
    delay = base_delay
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_transient(e) or retries >= max_retries:
                raise
            retries += 1
            logger.warning(
                "Database operation failed, retrying (%d/%d): %s",
                retries, max_retries, e,
                extra={"attempt": retries},
            )
            await sleep(delay)
            delay *= 2
