"""
Database utilities and transaction management.
"""

import contextlib
import functools
import logging
import sys
from typing import AsyncGenerator

from asgiref.sync import sync_to_async
from django.db import InterfaceError, OperationalError, transaction

from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def async_transaction() -> AsyncGenerator[None, None]:
    """
    Async context manager for database transactions.

    The atomic block is entered and left through thread-sensitive
    ``sync_to_async`` calls, so it wraps the same connection the
    repositories use.

    Usage:
        async with async_transaction():
            # Database operations
            pass
    """
    atomic = transaction.atomic()
    await sync_to_async(atomic.__enter__)()
    try:
        yield
    except BaseException:
        await sync_to_async(atomic.__exit__)(*sys.exc_info())
        raise
    else:
        await sync_to_async(atomic.__exit__)(None, None, None)


def store_operation(func):
    """
    Translate connection-level database failures into StoreUnavailableError.

    Integrity errors are left alone; repositories map those to domain
    conflicts themselves.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error("Store call %s failed: %s", func.__qualname__, exc, exc_info=True)
            raise StoreUnavailableError() from exc

    return wrapper
