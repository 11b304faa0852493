import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from databases import Database
from databases.core import Connection

from devflow.errors import DevflowError, TransactionError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(database: Database, name: str) -> AsyncIterator[Connection]:
    """
    Runs a unit of work on one connection inside one transaction.

    The connection is handed to the caller and must be passed to every query
    that belongs to the unit of work. Leaving the block normally commits.
    Any exception rolls back first and then propagates: errors from our own
    taxonomy pass through unchanged, anything else (driver errors, unique
    constraint violations, a failed commit) is logged and re-raised as a
    TransactionError. The connection is released on every path.
    """
    async with database.connection() as connection:
        tx = connection.transaction()
        await tx.start()
        try:
            yield connection
        except DevflowError as e:
            await tx.rollback()
            logger.info("%s aborted: %s", name, e.message)
            raise
        except Exception as e:
            await tx.rollback()
            logger.exception("%s aborted by the database", name)
            raise TransactionError() from e
        try:
            await tx.commit()
        except Exception as e:
            logger.exception("%s failed to commit", name)
            raise TransactionError() from e
