"""Domain types for the isolation probe harness."""

from isoprobe.models.enums import Engine, IsolationLevel, Outcome, ScenarioKind
from isoprobe.models.scenario import Observation, Row, RunReport, ScenarioCase

__all__ = [
    "Engine",
    "IsolationLevel",
    "Observation",
    "Outcome",
    "Row",
    "RunReport",
    "ScenarioCase",
    "ScenarioKind",
]
