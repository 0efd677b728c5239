"""Unit tests for the MySQL session."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from mysql.connector import errors as mysql_errors

from isoprobe.core.exceptions import (
    QueryError,
    SerializationConflictError,
    SessionConnectionError,
)
from isoprobe.models.enums import Engine, IsolationLevel
from isoprobe.services.mysql_session import LOCK_WAIT_TIMEOUT_STATEMENT, MySQLSession
from isoprobe.tests.mock_utils import make_config

LOCK_WAIT = "Lock wait timeout exceeded; try restarting transaction"


@pytest.fixture
def mock_cursor():
    cursor = MagicMock()
    cursor.execute = AsyncMock()
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.close = AsyncMock()
    cursor.description = None
    return cursor


@pytest.fixture
def mock_connection(mock_cursor):
    connection = MagicMock()
    connection.cursor = AsyncMock(return_value=mock_cursor)
    connection.close = AsyncMock()
    return connection


@pytest.fixture
def session(mock_connection):
    return MySQLSession(mock_connection)


class TestConnect:
    """Tests for MySQLSession.connect."""

    @pytest.mark.asyncio
    async def test_autocommit_connection(self, mock_connection) -> None:
        with patch(
            "isoprobe.services.mysql_session.mysql_aio.connect",
            new=AsyncMock(return_value=mock_connection),
        ) as mock_connect:
            session = await MySQLSession.connect(make_config(Engine.MYSQL))

        kwargs = mock_connect.await_args.kwargs
        assert kwargs["host"] == "db.test"
        assert kwargs["port"] == 3306
        assert kwargs["user"] == "tester"
        assert kwargs["password"] == "s3cret"
        assert kwargs["database"] == "test"
        assert kwargs["autocommit"] is True
        assert kwargs["charset"] == "utf8mb4"
        assert session.engine is Engine.MYSQL

    @pytest.mark.asyncio
    async def test_failure_wrapped(self) -> None:
        error = mysql_errors.ProgrammingError(
            msg="Access denied for user 'tester'@'localhost' (using password: YES)",
            errno=1045,
        )
        with patch(
            "isoprobe.services.mysql_session.mysql_aio.connect",
            new=AsyncMock(side_effect=error),
        ):
            with pytest.raises(SessionConnectionError) as exc_info:
                await MySQLSession.connect(make_config(Engine.MYSQL))

        assert exc_info.value.original_error is error
        assert exc_info.value.details["engine"] == "mysql"


class TestExecute:
    """Tests for MySQLSession.execute."""

    @pytest.mark.asyncio
    async def test_rows_fetched_from_cursor(self, session, mock_connection, mock_cursor) -> None:
        mock_cursor.description = [("a",), ("b",)]
        mock_cursor.fetchall.return_value = [{"a": 1, "b": 1}]

        rows = await session.execute("SELECT * FROM test WHERE a = 1")

        assert rows == [{"a": 1, "b": 1}]
        mock_connection.cursor.assert_awaited_once_with(dictionary=True)
        mock_cursor.execute.assert_awaited_once_with("SELECT * FROM test WHERE a = 1")
        mock_cursor.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_statement_without_result_set(self, session, mock_cursor) -> None:
        rows = await session.execute("INSERT INTO test VALUES (3, 3)")

        assert rows == []
        mock_cursor.fetchall.assert_not_awaited()
        mock_cursor.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lock_wait_timeout_is_conflict(self, session, mock_cursor) -> None:
        mock_cursor.execute.side_effect = mysql_errors.DatabaseError(msg=LOCK_WAIT, errno=1205)

        with pytest.raises(SerializationConflictError) as exc_info:
            await session.execute("SELECT * FROM test WHERE a = 1 FOR UPDATE")

        assert exc_info.value.native_message == LOCK_WAIT
        assert exc_info.value.code == 1205
        mock_cursor.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_error_is_plain_query_error(self, session, mock_cursor) -> None:
        mock_cursor.execute.side_effect = mysql_errors.ProgrammingError(
            msg="Table 'test.test' doesn't exist", errno=1146
        )

        with pytest.raises(QueryError) as exc_info:
            await session.execute("SELECT * FROM test")

        assert not isinstance(exc_info.value, SerializationConflictError)
        assert exc_info.value.native_message == "Table 'test.test' doesn't exist"

    @pytest.mark.asyncio
    async def test_cursor_close_failure_keeps_native_error(
        self, session, mock_cursor, caplog
    ) -> None:
        mock_cursor.execute.side_effect = mysql_errors.DatabaseError(msg=LOCK_WAIT, errno=1205)
        mock_cursor.close.side_effect = mysql_errors.OperationalError(
            msg="Lost connection to MySQL server during query", errno=2013
        )

        with pytest.raises(SerializationConflictError) as exc_info:
            await session.execute("SELECT * FROM test WHERE a = 1 FOR UPDATE")

        assert exc_info.value.native_message == LOCK_WAIT
        assert exc_info.value.code == 1205
        assert any("Failed to close MySQL cursor" in message for message in caplog.messages)

    @pytest.mark.asyncio
    async def test_cursor_close_failure_after_success_returns_rows(
        self, session, mock_cursor
    ) -> None:
        mock_cursor.description = [("a",), ("b",)]
        mock_cursor.fetchall.return_value = [{"a": 1, "b": 1}]
        mock_cursor.close.side_effect = mysql_errors.OperationalError(
            msg="Lost connection to MySQL server during query", errno=2013
        )

        assert await session.execute("SELECT * FROM test WHERE a = 1") == [{"a": 1, "b": 1}]


class TestBeginTransaction:
    """Tests for MySQLSession.begin_transaction."""

    @pytest.mark.asyncio
    async def test_settings_precede_begin(self, session, mock_cursor) -> None:
        await session.begin_transaction(IsolationLevel.READ_UNCOMMITTED)

        assert mock_cursor.execute.await_args_list == [
            call(LOCK_WAIT_TIMEOUT_STATEMENT),
            call("SET TRANSACTION ISOLATION LEVEL READ UNCOMMITTED"),
            call("BEGIN"),
        ]

    def test_lock_wait_timeout_is_zero(self) -> None:
        assert LOCK_WAIT_TIMEOUT_STATEMENT == "SET innodb_lock_wait_timeout = 0"


class TestClose:
    """Tests for MySQLSession.close."""

    @pytest.mark.asyncio
    async def test_close_once(self, session, mock_connection) -> None:
        await session.close()
        await session.close()

        mock_connection.close.assert_awaited_once()
