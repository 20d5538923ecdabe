"""Supabase Postgres access with RLS context and storage retries.

Every request gets a connection where ``app.current_user_id`` is set via
``SET LOCAL``, ensuring that Postgres Row-Level Security policies see the
correct identity.

Uses ``asyncpg`` for direct database access with RLS context — the
Supabase Python client doesn't support SET LOCAL session variables.

Transient connection failures are retried with exponential backoff.  When
retries run out the failure is raised as ``StorageUnavailableError`` so the
API can answer 503 instead of conflating it with "no data yet".
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, TypeVar

import asyncpg

from src.config import Settings, get_settings

logger = logging.getLogger("bloom.db")

T = TypeVar("T")

# Module-level connection pool, initialized once at app startup
_pool: asyncpg.Pool | None = None

# Errors worth retrying: the server or network, not the query
_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
    asyncpg.TooManyConnectionsError,
    ConnectionError,
    OSError,
    asyncio.TimeoutError,
)


class StorageUnavailableError(RuntimeError):
    """The database could not be reached after retrying."""


async def init_pool(settings: Settings | None = None) -> asyncpg.Pool:
    """Create the asyncpg connection pool. Call once at app startup."""
    global _pool
    s = settings or get_settings()
    _pool = await asyncpg.create_pool(
        s.supabase_db_url,
        min_size=s.db_pool_min_size,
        max_size=s.db_pool_max_size,
        command_timeout=s.db_command_timeout,
    )
    logger.info(
        "Database pool initialized (min=%d, max=%d)",
        s.db_pool_min_size, s.db_pool_max_size,
    )
    return _pool


async def close_pool() -> None:
    """Drain the pool. Call at app shutdown."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise StorageUnavailableError("Database pool not initialized — call init_pool() first")
    return _pool


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
) -> T:
    """Run ``operation`` retrying transient storage failures.

    Args:
        operation:        Zero-argument coroutine factory; called once per attempt.
        attempts:         Total attempts (defaults to settings).
        backoff_seconds:  First delay; doubles after every failed attempt.

    Returns:
        The operation's result.

    Raises:
        StorageUnavailableError: When every attempt failed with a transient error.
    """
    if attempts is None or backoff_seconds is None:
        settings = get_settings()
        attempts = attempts or settings.storage_retry_attempts
        backoff_seconds = (
            settings.storage_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
    total = max(attempts, 1)
    delay = backoff_seconds

    for attempt in range(1, total + 1):
        try:
            return await operation()
        except _TRANSIENT_ERRORS as exc:
            if attempt == total:
                logger.error("Storage unavailable after %d attempts: %s", total, exc)
                raise StorageUnavailableError(str(exc)) from exc
            logger.warning(
                "Storage attempt %d/%d failed (%s); retrying in %.2fs",
                attempt, total, exc, delay,
            )
            await asyncio.sleep(delay)
            delay *= 2

    raise StorageUnavailableError("No storage attempts were made")


@asynccontextmanager
async def get_connection(
    user_id: uuid.UUID | None = None,
    request_id: uuid.UUID | None = None,
) -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire a connection with RLS session variables set.

    Usage::

        async with get_connection(user_id=ctx.app_user_id) as conn:
            rows = await conn.fetch("SELECT * FROM period_logs WHERE date = $1", today)

    The ``SET LOCAL`` calls are scoped to the current transaction so they
    disappear automatically when the connection is returned to the pool.
    Everything inside the block runs in that one transaction.
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            if user_id:
                await conn.execute(
                    "SET LOCAL app.current_user_id = $1", str(user_id)
                )
            if request_id:
                await conn.execute(
                    "SET LOCAL app.request_id = $1", str(request_id)
                )

            yield conn


async def execute(query: str, *args: Any, user_id: uuid.UUID | None = None) -> str:
    """Execute a single statement with RLS context and return status."""

    async def _run() -> str:
        async with get_connection(user_id=user_id) as conn:
            return await conn.execute(query, *args)

    return await with_retry(_run)


async def fetch(
    query: str, *args: Any, user_id: uuid.UUID | None = None
) -> list[asyncpg.Record]:
    """Fetch rows with RLS context."""

    async def _run() -> list[asyncpg.Record]:
        async with get_connection(user_id=user_id) as conn:
            return await conn.fetch(query, *args)

    return await with_retry(_run)


async def fetchrow(
    query: str, *args: Any, user_id: uuid.UUID | None = None
) -> asyncpg.Record | None:
    """Fetch a single row with RLS context."""

    async def _run() -> asyncpg.Record | None:
        async with get_connection(user_id=user_id) as conn:
            return await conn.fetchrow(query, *args)

    return await with_retry(_run)


async def fetchval(query: str, *args: Any, user_id: uuid.UUID | None = None) -> Any:
    """Fetch a single value with RLS context."""

    async def _run() -> Any:
        async with get_connection(user_id=user_id) as conn:
            return await conn.fetchval(query, *args)

    return await with_retry(_run)
