"""Atomic units of work over an AsyncSession.

Every business operation that mutates orders or stock runs inside exactly one
unit of work: all statements commit together, or the session is rolled back
and nothing becomes visible.

Usage:
    async with unit_of_work(db):
        product = await ledger.lock(product_id)
        ...
    # committed here; rolled back if the block raised

Reads run in a ``read_scope`` so the transaction they open is closed again
before the caller moves on. On SQLite every transaction holds the database
write lock, so a read left open would block every other writer.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.config.settings import get_settings
from poscore.core.exceptions import LockWaitTimeoutError

# PostgreSQL lock_not_available, deadlock_detected / SQLite busy
_LOCK_TIMEOUT_SQLSTATES = {"55P03", "40P01"}
_LOCK_TIMEOUT_MARKERS = ("database is locked", "lock timeout", "deadlock detected")


def is_lock_timeout(exc: DBAPIError) -> bool:
    """Return True if a driver error means a lock wait gave up."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _LOCK_TIMEOUT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _LOCK_TIMEOUT_MARKERS)


@asynccontextmanager
async def unit_of_work(
    db: AsyncSession,
    *,
    lock_timeout_ms: int | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Run a block as one atomic transaction.

    Args:
        db: Session owned by the current operation
        lock_timeout_ms: Row-lock wait limit (PostgreSQL); defaults to settings

    Yields:
        The same session

    Raises:
        LockWaitTimeoutError: If a lock could not be acquired in time
    """
    if lock_timeout_ms is None:
        lock_timeout_ms = get_settings().LOCK_TIMEOUT_MS

    try:
        if lock_timeout_ms and db.bind is not None and db.bind.dialect.name == "postgresql":
            await db.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))
        yield db
        await db.commit()
    except DBAPIError as exc:
        await db.rollback()
        if is_lock_timeout(exc):
            raise LockWaitTimeoutError(str(exc.orig)) from exc
        raise
    except BaseException:
        await db.rollback()
        raise


@asynccontextmanager
async def read_scope(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Run read-only statements and end the transaction they opened.

    A transaction that was already open on entry belongs to the caller and
    is left untouched.

    Args:
        db: Session owned by the current operation

    Yields:
        The same session
    """
    owns_transaction = not db.in_transaction()
    try:
        yield db
    except BaseException:
        if owns_transaction:
            await db.rollback()
        raise
    if owns_transaction and db.in_transaction():
        await db.commit()
