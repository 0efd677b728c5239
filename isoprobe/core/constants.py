"""Harness-wide constants.

This module provides centralized constants for:
- The fixture table name and the statements that rebuild it
- The canonical conflict message each engine reports

Usage:
    from isoprobe.core.constants import FIXTURE_STATEMENTS, get_conflict_message

    for sql in FIXTURE_STATEMENTS:
        await session.execute(sql)
"""

from isoprobe.models.enums import Engine

# -----------------------------------------------------------------------------
# Fixture Table
# -----------------------------------------------------------------------------
DATABASE_NAME = "test"
"""Default database every session connects to."""

FIXTURE_TABLE = "test"
"""Two-column relation ``(a INTEGER PRIMARY KEY, b INTEGER)``."""

FIXTURE_STATEMENTS: tuple[str, ...] = (
    f"DROP TABLE IF EXISTS {FIXTURE_TABLE}",
    f"CREATE TABLE {FIXTURE_TABLE} (a INTEGER PRIMARY KEY, b INTEGER)",
    f"INSERT INTO {FIXTURE_TABLE} VALUES (1, 1)",
    f"INSERT INTO {FIXTURE_TABLE} VALUES (2, 2)",
)
"""Drop, recreate and reseed the fixture table. Safe to run repeatedly."""

# -----------------------------------------------------------------------------
# Canonical Conflict Messages
# -----------------------------------------------------------------------------
# Compared verbatim against the engine's native error text. Do not reword.
CONFLICT_MESSAGES: dict[Engine, str] = {
    Engine.POSTGRES: "could not serialize access due to concurrent update",
    Engine.MYSQL: "Lock wait timeout exceeded; try restarting transaction",
}


def get_conflict_message(engine: Engine) -> str | None:
    """Get the canonical conflict message for an engine.

    Args:
        engine: Engine variant

    Returns:
        The exact message text, or None if the engine has no registered entry
    """
    return CONFLICT_MESSAGES.get(engine)


def is_conflict_message(engine: Engine, message: str) -> bool:
    """Check whether ``message`` is exactly the engine's canonical conflict text."""
    expected = get_conflict_message(engine)
    return expected is not None and message == expected
