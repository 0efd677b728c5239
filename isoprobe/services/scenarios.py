"""Anomaly probes.

Every probe holds everything fixed except one action on session B between
two observations by session A:

- dirty read: B updates without committing
- fuzzy read: B updates and commits
- locking fuzzy read: as fuzzy read, A's second read locks the row
- phantom read: B inserts a row and commits, A counts rows

Each statement is awaited before the next one is issued; the anomaly depends
on the order the server sees them in.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from isoprobe.core.exceptions import QueryError
from isoprobe.core.protocols import SessionProtocol
from isoprobe.models.enums import Outcome, ScenarioKind
from isoprobe.models.scenario import Observation, Row
from isoprobe.services.outcome import assert_consistency, classify_error
from isoprobe.services.transaction import commit

SELECT_ROW = "SELECT * FROM test WHERE a = 1"
SELECT_ROW_FOR_UPDATE = "SELECT * FROM test WHERE a = 1 FOR UPDATE"
SELECT_ALL = "SELECT * FROM test"
UPDATE_ROW = "UPDATE test SET b = 10 WHERE a = 1"
INSERT_ROW = "INSERT INTO test VALUES (3, 3)"

ScenarioFunc = Callable[[SessionProtocol, SessionProtocol, Outcome], Awaitable[Observation]]


def _value_of_b(rows: list[Row]) -> object:
    if not rows:
        raise LookupError("Fixture row a=1 not found")
    return rows[0]["b"]


async def dirty_read(a: SessionProtocol, b: SessionProtocol, expected: Outcome) -> Observation:
    before = _value_of_b(await a.execute(SELECT_ROW))

    await b.execute(UPDATE_ROW)

    after = _value_of_b(await a.execute(SELECT_ROW))

    observed = assert_consistency(before, after, expected)
    return Observation(before=before, after=after, observed=observed)


async def fuzzy_read(a: SessionProtocol, b: SessionProtocol, expected: Outcome) -> Observation:
    before = _value_of_b(await a.execute(SELECT_ROW))

    await b.execute(UPDATE_ROW)
    await commit(b)

    after = _value_of_b(await a.execute(SELECT_ROW))

    observed = assert_consistency(before, after, expected)
    return Observation(before=before, after=after, observed=observed)


async def locking_fuzzy_read(
    a: SessionProtocol, b: SessionProtocol, expected: Outcome
) -> Observation:
    """Fuzzy read where A's second read is ``SELECT ... FOR UPDATE``.

    The locking read may fail with the engine's conflict error. Only that
    read is guarded; a failure anywhere else propagates.
    """
    before = _value_of_b(await a.execute(SELECT_ROW))

    await b.execute(UPDATE_ROW)
    await commit(b)

    try:
        rows = await a.execute(SELECT_ROW_FOR_UPDATE)
    except QueryError as e:
        observed = classify_error(e, expected, a.engine)
        return Observation(before=before, after=None, observed=observed)

    after = _value_of_b(rows)
    observed = assert_consistency(before, after, expected)
    return Observation(before=before, after=after, observed=observed)


async def phantom_read(a: SessionProtocol, b: SessionProtocol, expected: Outcome) -> Observation:
    before = len(await a.execute(SELECT_ALL))

    await b.execute(INSERT_ROW)
    await commit(b)

    after = len(await a.execute(SELECT_ALL))

    observed = assert_consistency(before, after, expected)
    return Observation(before=before, after=after, observed=observed)


SCENARIOS: dict[ScenarioKind, ScenarioFunc] = {
    ScenarioKind.DIRTY_READ: dirty_read,
    ScenarioKind.FUZZY_READ: fuzzy_read,
    ScenarioKind.LOCKING_FUZZY_READ: locking_fuzzy_read,
    ScenarioKind.PHANTOM_READ: phantom_read,
}


def get_scenario(kind: ScenarioKind) -> ScenarioFunc:
    """Get the probe for ``kind``."""
    return SCENARIOS[kind]
