"""MySQL (InnoDB) session backed by mysql-connector-python's asyncio API.

InnoDB takes ``SET TRANSACTION`` and the lock-wait timeout for the *next*
transaction, so both are issued before ``BEGIN``. The lock-wait timeout is
zero so that lock conflicts fail immediately instead of blocking the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mysql.connector import aio as mysql_aio
from mysql.connector import errors as mysql_errors

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

LOCK_WAIT_TIMEOUT_STATEMENT = "SET innodb_lock_wait_timeout = 0"


class MySQLSession:
    """One MySQL connection implementing ``SessionProtocol``.

    The connection runs in autocommit mode; transactions are opened and
    committed with explicit ``BEGIN`` / ``COMMIT`` statements.
    """

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._closed = False

    @property
    def engine(self) -> Engine:
        return Engine.MYSQL

    @classmethod
    async def connect(cls, config: ConnectionConfig) -> MySQLSession:
        """Open a session.

        Raises:
            SessionConnectionError: If authentication, network or timeout fails
        """
        try:
            connection = await mysql_aio.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password or "",
                database=config.database,
                charset="utf8mb4",
                time_zone="+00:00",
                autocommit=True,
                connection_timeout=int(config.connect_timeout),
            )
        except (OSError, TimeoutError, mysql_errors.Error) as e:
            logger.error(
                f"MySQL connection failed: {sanitize_error(e)}",
                extra={"host": config.host, "port": config.port},
            )
            raise SessionConnectionError(
                f"Could not connect to MySQL at {config.host}:{config.port}: {e}",
                engine=Engine.MYSQL.value,
                host=config.host,
                original_error=e,
            ) from e

        logger.debug("MySQL session opened", extra={"host": config.host})
        return cls(connection)

    async def execute(self, sql: str) -> list[Row]:
        """Run ``sql`` and return its rows as dicts.

        Rows come back inside a cursor and have to be fetched; statements
        without a result set leave ``cursor.description`` empty.
        """
        try:
            cursor = await self._connection.cursor(dictionary=True)
            try:
                await cursor.execute(sql)
                rows = [] if cursor.description is None else await cursor.fetchall()
            finally:
                await self._close_cursor(cursor)
        except mysql_errors.Error as e:
            raise self._query_error(e, sql) from e
        return [dict(row) for row in rows]

    @staticmethod
    async def _close_cursor(cursor: Any) -> None:
        # A failing close must not replace the statement's own error
        try:
            await cursor.close()
        except mysql_errors.Error as e:
            logger.warning(f"Failed to close MySQL cursor: {sanitize_error(e)}")

    async def begin_transaction(self, level: IsolationLevel) -> None:
        await self.execute(LOCK_WAIT_TIMEOUT_STATEMENT)
        await self.execute(isolation_level_statement(level))
        await self.execute(BEGIN)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._connection.close()
        logger.debug("MySQL session closed")

    @staticmethod
    def _query_error(error: mysql_errors.Error, sql: str) -> QueryError:
        # ``msg`` is the server text without the "errno (sqlstate):" prefix str() adds
        message = error.msg or str(error)
        error_cls = (
            SerializationConflictError if is_conflict_message(Engine.MYSQL, message) else QueryError
        )
        return error_cls(message, code=error.errno, sql=sql, engine=Engine.MYSQL.value)
