"""Scenario catalog and sequential driver.

``CATALOG`` lists every (scenario, engine, level A, level B, expected) case.
``run_catalog`` runs them one after another and stops at the first failure;
cases never overlap, only the two sessions inside one case do.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import partial
from typing import TYPE_CHECKING

from isoprobe.core.logging import get_logger, set_scenario_label
from isoprobe.models.enums import Engine, IsolationLevel, Outcome, ScenarioKind
from isoprobe.models.scenario import Observation, RunReport, ScenarioCase
from isoprobe.services.orchestrator import with_sessions
from isoprobe.services.scenarios import get_scenario

if TYPE_CHECKING:
    from isoprobe.services.connection import SessionProvider

logger = get_logger(__name__)

_RU = IsolationLevel.READ_UNCOMMITTED
_RC = IsolationLevel.READ_COMMITTED
_RR = IsolationLevel.REPEATABLE_READ


def _case(
    kind: ScenarioKind,
    engine: Engine,
    level_a: IsolationLevel,
    expected: Outcome,
    level_b: IsolationLevel = _RR,
) -> ScenarioCase:
    return ScenarioCase(kind, engine, level_a, level_b, expected)


CATALOG: tuple[ScenarioCase, ...] = (
    # MySQL / InnoDB
    _case(ScenarioKind.DIRTY_READ, Engine.MYSQL, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.DIRTY_READ, Engine.MYSQL, _RC, Outcome.CONSISTENT),
    _case(ScenarioKind.DIRTY_READ, Engine.MYSQL, _RU, Outcome.INCONSISTENT),
    _case(ScenarioKind.FUZZY_READ, Engine.MYSQL, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.FUZZY_READ, Engine.MYSQL, _RC, Outcome.INCONSISTENT),
    _case(ScenarioKind.FUZZY_READ, Engine.MYSQL, _RU, Outcome.INCONSISTENT),
    _case(ScenarioKind.PHANTOM_READ, Engine.MYSQL, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.PHANTOM_READ, Engine.MYSQL, _RC, Outcome.INCONSISTENT),
    _case(ScenarioKind.PHANTOM_READ, Engine.MYSQL, _RU, Outcome.INCONSISTENT),
    # A locking read sees the latest committed row, even under repeatable read
    _case(ScenarioKind.LOCKING_FUZZY_READ, Engine.MYSQL, _RR, Outcome.INCONSISTENT),
    _case(ScenarioKind.LOCKING_FUZZY_READ, Engine.MYSQL, _RC, Outcome.INCONSISTENT),
    _case(ScenarioKind.LOCKING_FUZZY_READ, Engine.MYSQL, _RU, Outcome.INCONSISTENT),
    # PostgreSQL
    _case(ScenarioKind.DIRTY_READ, Engine.POSTGRES, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.DIRTY_READ, Engine.POSTGRES, _RC, Outcome.CONSISTENT),
    _case(ScenarioKind.FUZZY_READ, Engine.POSTGRES, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.FUZZY_READ, Engine.POSTGRES, _RC, Outcome.INCONSISTENT),
    _case(ScenarioKind.PHANTOM_READ, Engine.POSTGRES, _RR, Outcome.CONSISTENT),
    _case(ScenarioKind.PHANTOM_READ, Engine.POSTGRES, _RC, Outcome.INCONSISTENT),
    _case(ScenarioKind.LOCKING_FUZZY_READ, Engine.POSTGRES, _RR, Outcome.ERROR),
    _case(ScenarioKind.LOCKING_FUZZY_READ, Engine.POSTGRES, _RC, Outcome.INCONSISTENT),
)


def select_cases(
    cases: Iterable[ScenarioCase] = CATALOG,
    *,
    engines: Iterable[Engine] | None = None,
    kinds: Iterable[ScenarioKind] | None = None,
) -> list[ScenarioCase]:
    """Filter ``cases`` by engine and scenario kind, keeping catalog order.

    A filter left as None matches everything.
    """
    engine_set = set(engines) if engines else None
    kind_set = set(kinds) if kinds else None
    return [
        case
        for case in cases
        if (engine_set is None or case.engine in engine_set)
        and (kind_set is None or case.kind in kind_set)
    ]


async def run_case(provider: SessionProvider, case: ScenarioCase) -> Observation:
    """Run one catalog case and return what it observed.

    Raises:
        OutcomeMismatchError: If the observation contradicts the expectation
        QueryError: If a statement failed and the failure was not expected
        SessionConnectionError: If a session could not be opened
    """
    logger.info(case.label)
    scenario = partial(get_scenario(case.kind), expected=case.expected)
    return await with_sessions(provider, case.engine, case.level_a, case.level_b, scenario)


async def run_catalog(
    provider: SessionProvider,
    cases: Sequence[ScenarioCase] = CATALOG,
) -> RunReport:
    """Run ``cases`` strictly one after another.

    The first error aborts the run and propagates; there is no
    continue-on-failure mode.
    """
    report = RunReport()
    for case in cases:
        # Left set on failure so the caller's error log names the case
        set_scenario_label(case.label)
        observation = await run_case(provider, case)
        logger.debug(
            f"Observed {observation.observed.value}",
            extra={
                "case": case.to_dict(),
                "before": observation.before,
                "after": observation.after,
            },
        )
        report.record(case, observation)
    set_scenario_label(None)
    return report
