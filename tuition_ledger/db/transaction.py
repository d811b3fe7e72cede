"""Bounded, all-or-nothing unit of work over an ``AsyncSession``."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from tuition_ledger.core.exceptions import TransactionTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_in_transaction(
    db: AsyncSession,
    fn: Callable[[AsyncSession], Awaitable[T]],
    *,
    operation: str,
    timeout_ms: int,
    wait_ms: int,
) -> T:
    """
    Run ``fn(db)`` inside a single transaction and commit on success.

    Any exception raised by ``fn`` rolls back every write made through ``db`` and is
    re-raised unchanged. Acquiring the connection is bounded by ``wait_ms`` and the
    body by ``timeout_ms``; exceeding either rolls back and raises
    ``TransactionTimeoutError``.

    The session must not hold unflushed changes of its own; they raise ``RuntimeError``
    instead of being committed ahead of the unit. An implicit transaction left open by
    earlier reads is committed first so the bounded block starts clean.
    """
    if db.new or db.dirty or db.deleted:
        raise RuntimeError(f"{operation} started on a session with unflushed changes")
    if db.in_transaction():
        await db.commit()

    phase, limit_ms = "wait", wait_ms
    try:
        async with db.begin():
            await asyncio.wait_for(db.connection(), timeout=wait_ms / 1000)
            phase, limit_ms = "execution", timeout_ms
            return await asyncio.wait_for(fn(db), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as exc:
        logger.error("%s timed out in %s phase after %s ms; rolled back", operation, phase, limit_ms)
        raise TransactionTimeoutError(operation, limit_ms) from exc
