import asyncio
import functools
import weakref
from collections.abc import Awaitable, Callable
from typing import Concatenate, ParamSpec, TypeVar

import aiosqlite
import structlog

from ticketing.commands.result import CommandError, CommandResult
from ticketing.domain_events.service import DomainEventLog
from ticketing.exceptions import AppError, DatabaseError

logger = structlog.get_logger()

P = ParamSpec("P")
T = TypeVar("T")
ServiceT = TypeVar("ServiceT", bound="CommandService")

# One transaction at a time per connection
_transaction_locks: "weakref.WeakKeyDictionary[aiosqlite.Connection, asyncio.Lock]" = (
    weakref.WeakKeyDictionary()
)


def transaction_lock(db: aiosqlite.Connection) -> asyncio.Lock:
    lock = _transaction_locks.get(db)
    if lock is None:
        lock = _transaction_locks[db] = asyncio.Lock()
    return lock


class CommandService:
    """Base for services whose public methods are commands.

    Commands run against one connection and either commit all of their
    writes or roll them back. Commands sharing a connection run one after
    another, so a rollback never discards another command's writes.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._event_log = DomainEventLog(db)


def command(
    name: str,
) -> Callable[
    [Callable[Concatenate[ServiceT, P], Awaitable[T]]],
    Callable[Concatenate[ServiceT, P], Awaitable[CommandResult[T]]],
]:
    """Turn a service method into a command returning a ``CommandResult``.

    Domain errors become failed results. Driver errors become a
    ``DATABASE_ERROR`` result. Anything else is rolled back and propagates.
    """

    def decorator(
        fn: Callable[Concatenate[ServiceT, P], Awaitable[T]],
    ) -> Callable[Concatenate[ServiceT, P], Awaitable[CommandResult[T]]]:
        @functools.wraps(fn)
        async def wrapper(self: ServiceT, *args: P.args, **kwargs: P.kwargs) -> CommandResult[T]:
            async with transaction_lock(self._db):
                try:
                    data = await fn(self, *args, **kwargs)
                    await self._db.commit()
                except AppError as exc:
                    await self._db.rollback()
                    logger.info("command_rejected", command=name, code=exc.code)
                    return CommandResult.fail(CommandError.from_exception(exc))
                except aiosqlite.Error as exc:
                    await self._db.rollback()
                    logger.exception("command_failed", command=name, error=str(exc))
                    error = DatabaseError(f"An unexpected error occurred while executing {name}")
                    return CommandResult.fail(CommandError.from_exception(error))
                except BaseException:
                    await self._db.rollback()
                    raise

            logger.info("command_succeeded", command=name)
            return CommandResult.ok(data)

        return wrapper

    return decorator
