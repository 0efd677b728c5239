"""Protocol definitions for engine sessions.

Scenario and orchestrator code depend only on ``SessionProtocol``. Each engine
variant implements it structurally; there is no shared base class.

Protocol Definitions:
    - SessionProtocol: one open connection able to run statements and
      transactions
    - SessionFactory: coroutine that opens a session from a connection config

See Also:
    - isoprobe/services/mysql_session.py - MySQL (InnoDB) implementation
    - isoprobe/services/postgres_session.py - PostgreSQL implementation
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from isoprobe.core.config import ConnectionConfig
    from isoprobe.models.enums import Engine, IsolationLevel
    from isoprobe.models.scenario import Row


@runtime_checkable
class SessionProtocol(Protocol):
    """Protocol for an open, stateful connection to one engine.

    A session is enlisted in at most one open transaction at a time. Whoever
    opened it closes it.
    """

    @property
    def engine(self) -> Engine:
        """Engine variant this session talks to."""
        ...

    async def execute(self, sql: str) -> list[Row]:
        """Run one statement and return its rows.

        Statements without a result set return an empty list.

        Raises:
            QueryError: If the engine rejects the statement
        """
        ...

    async def begin_transaction(self, level: IsolationLevel) -> None:
        """Configure ``level`` and start a transaction, in engine order.

        Raises:
            QueryError: If the engine rejects the level or the begin
        """
        ...

    async def close(self) -> None:
        """Close the connection. Any open transaction is aborted by the engine."""
        ...


SessionFactory = Callable[["ConnectionConfig"], Awaitable[SessionProtocol]]
