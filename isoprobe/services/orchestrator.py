"""Dual-session orchestration.

Runs one scenario against two independent sessions of the same engine:

1. Rebuild the fixture table on a throwaway session
2. Open session A, then session B
3. Begin A's transaction, then B's (A always starts first)
4. Await the scenario with both sessions
5. Close A and B on every exit path

No commit or rollback is issued here. Scenarios commit what they need; the
rest is aborted by the engine when the session closes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from isoprobe.core.constants import FIXTURE_STATEMENTS
from isoprobe.core.logging import get_logger, sanitize_error
from isoprobe.core.protocols import SessionProtocol
from isoprobe.services.transaction import begin_transaction

if TYPE_CHECKING:
    from isoprobe.models.enums import Engine, IsolationLevel
    from isoprobe.services.connection import SessionProvider

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")

Scenario = Callable[[SessionProtocol, SessionProtocol], Awaitable[ResultT]]


async def reset_fixture(provider: SessionProvider, engine: Engine) -> None:
    """Drop, recreate and reseed the fixture table.

    Uses its own session, closed before returning. Running it twice in a row
    is fine: the drop tolerates a missing table.
    """
    session = await provider.open(engine)
    try:
        for sql in FIXTURE_STATEMENTS:
            await session.execute(sql)
    except BaseException:
        await close_sessions([session])
        raise

    close_error = await close_sessions([session])
    if close_error is not None:
        raise close_error
    logger.debug("Fixture reset", extra={"engine": engine.value})


async def close_sessions(sessions: list[SessionProtocol]) -> Exception | None:
    """Close every session, best-effort.

    A failing close does not stop the others from being closed.

    Returns:
        The first close failure, or None if every close succeeded
    """
    first_error: Exception | None = None
    for session in sessions:
        try:
            await session.close()
        except Exception as e:
            logger.warning(
                f"Failed to close {session.engine.value} session: {sanitize_error(e)}",
                exc_info=True,
            )
            if first_error is None:
                first_error = e
    return first_error


async def with_sessions(
    provider: SessionProvider,
    engine: Engine,
    level_a: IsolationLevel,
    level_b: IsolationLevel,
    scenario: Scenario[ResultT],
) -> ResultT:
    """Run ``scenario`` with two freshly begun transactions on ``engine``.

    Args:
        provider: Opens the sessions
        engine: Engine variant for both sessions
        level_a: Isolation level for session A
        level_b: Isolation level for session B
        scenario: Coroutine function called as ``scenario(a, b)``

    Returns:
        Whatever the scenario returns

    Raises:
        Any error from fixture reset, session open, begin or the scenario.
        A close failure is raised only when nothing else failed.
    """
    await reset_fixture(provider, engine)

    sessions: list[SessionProtocol] = []
    try:
        session_a = await provider.open(engine)
        sessions.append(session_a)
        session_b = await provider.open(engine)
        sessions.append(session_b)

        await begin_transaction(session_a, level_a)
        await begin_transaction(session_b, level_b)

        result = await scenario(session_a, session_b)
    except BaseException:
        await close_sessions(sessions)
        raise

    close_error = await close_sessions(sessions)
    if close_error is not None:
        raise close_error
    return result
