"""PostgreSQL session backed by asyncpg.

PostgreSQL scopes ``SET TRANSACTION`` to the transaction already open, so the
isolation level is set after ``BEGIN``.

Usage:
    session = await PostgresSession.connect(config)
    try:
        await session.begin_transaction(IsolationLevel.REPEATABLE_READ)
        rows = await session.execute("SELECT * FROM test")
    finally:
        await session.close()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg

from isoprobe.core.constants import is_conflict_message
from isoprobe.core.exceptions import (
    QueryError,
    SerializationConflictError,
    SessionConnectionError,
)
from isoprobe.core.logging import get_logger, sanitize_error
from isoprobe.models.enums import Engine, IsolationLevel
from isoprobe.services.transaction import BEGIN, isolation_level_statement

if TYPE_CHECKING:
    from isoprobe.core.config import ConnectionConfig
    from isoprobe.models.scenario import Row

logger = get_logger(__name__)


class PostgresSession:
    """One asyncpg connection implementing ``SessionProtocol``."""

    def __init__(self, connection: asyncpg.Connection) -> None:
        self._connection = connection
        self._closed = False

    @property
    def engine(self) -> Engine:
        return Engine.POSTGRES

    @classmethod
    async def connect(cls, config: ConnectionConfig) -> PostgresSession:
        """Open a session.

        Raises:
            SessionConnectionError: If authentication, network or timeout fails
        """
        try:
            connection = await asyncpg.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database,
                timeout=config.connect_timeout,
            )
        except (OSError, TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(
                f"PostgreSQL connection failed: {sanitize_error(e)}",
                extra={"host": config.host, "port": config.port},
            )
            raise SessionConnectionError(
                f"Could not connect to PostgreSQL at {config.host}:{config.port}: {e}",
                engine=Engine.POSTGRES.value,
                host=config.host,
                original_error=e,
            ) from e

        logger.debug("PostgreSQL session opened", extra={"host": config.host})
        return cls(connection)

    async def execute(self, sql: str) -> list[Row]:
        """Run ``sql`` and return its rows as dicts.

        asyncpg hands back ``Record`` objects directly, for any statement.
        """
        try:
            records = await self._connection.fetch(sql)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise self._query_error(e, sql) from e
        return [dict(record) for record in records]

    async def begin_transaction(self, level: IsolationLevel) -> None:
        await self.execute(BEGIN)
        await self.execute(isolation_level_statement(level))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._connection.close()
        logger.debug("PostgreSQL session closed")

    @staticmethod
    def _query_error(error: Exception, sql: str) -> QueryError:
        message = getattr(error, "message", None) or str(error)
        code = getattr(error, "sqlstate", None)
        error_cls = (
            SerializationConflictError
            if is_conflict_message(Engine.POSTGRES, message)
            else QueryError
        )
        return error_cls(message, code=code, sql=sql, engine=Engine.POSTGRES.value)
