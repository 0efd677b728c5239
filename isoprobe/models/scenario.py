"""Value types describing scenario cases and what they observed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from isoprobe.models.enums import Engine, IsolationLevel, Outcome, ScenarioKind

Row = dict[str, Any]
"""One result row, keyed by column name."""


@dataclass(frozen=True, slots=True)
class ScenarioCase:
    """One entry of the scenario catalog.

    Attributes:
        kind: Which anomaly probe to run
        engine: Engine variant to run it against
        level_a: Isolation level of the observing transaction (A)
        level_b: Isolation level of the interfering transaction (B)
        expected: Outcome the probe must produce
    """

    kind: ScenarioKind
    engine: Engine
    level_a: IsolationLevel
    level_b: IsolationLevel
    expected: Outcome

    @property
    def label(self) -> str:
        """One-line progress label, e.g. ``dirty_read: mysql repeatable read/repeatable read => consistent``."""
        return f"{self.kind}: {self.engine} {self.level_a}/{self.level_b} => {self.expected}"

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "engine": self.engine.value,
            "level_a": self.level_a.value,
            "level_b": self.level_b.value,
            "expected": self.expected.value,
        }


@dataclass(frozen=True, slots=True)
class Observation:
    """What a scenario saw on its two reads.

    ``after`` is None when the second read failed with an accepted conflict.
    """

    before: Any
    after: Any
    observed: Outcome


@dataclass(slots=True)
class RunReport:
    """Results of a sequential catalog run."""

    results: list[tuple[ScenarioCase, Observation]] = field(default_factory=list)

    def record(self, case: ScenarioCase, observation: Observation) -> None:
        self.results.append((case, observation))

    @property
    def total(self) -> int:
        return len(self.results)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for _, observation in self.results if observation.observed is outcome)

    def summary(self) -> str:
        return (
            f"{self.total} scenarios passed "
            f"({self.count(Outcome.CONSISTENT)} consistent, "
            f"{self.count(Outcome.INCONSISTENT)} inconsistent, "
            f"{self.count(Outcome.ERROR)} error)"
        )
