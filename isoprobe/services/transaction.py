"""Transaction control shared by every engine variant.

Isolation-level syntax is the same on both engines; where it goes relative to
``BEGIN`` is not. Each session class owns the ordering, this module owns the
statement text and the single entry point callers use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from isoprobe.core.logging import get_logger
from isoprobe.models.enums import IsolationLevel

if TYPE_CHECKING:
    from isoprobe.core.protocols import SessionProtocol

logger = get_logger(__name__)

BEGIN = "BEGIN"
COMMIT = "COMMIT"


def isolation_level_statement(level: IsolationLevel) -> str:
    """Build the ``SET TRANSACTION ISOLATION LEVEL`` statement for ``level``."""
    return f"SET TRANSACTION ISOLATION LEVEL {IsolationLevel(level).value.upper()}"


async def begin_transaction(session: SessionProtocol, level: IsolationLevel) -> None:
    """Configure ``level`` on ``session`` and start a transaction.

    Raises:
        QueryError: If the engine rejects the level or the begin
    """
    logger.debug(
        "Beginning transaction",
        extra={"engine": session.engine.value, "isolation_level": level.value},
    )
    await session.begin_transaction(level)


async def commit(session: SessionProtocol) -> None:
    """Commit the open transaction on ``session``."""
    await session.execute(COMMIT)
