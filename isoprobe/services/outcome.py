"""Outcome classification for anomaly scenarios.

Two entry points:
- ``assert_consistency`` compares two observations against the expected outcome
- ``classify_error`` decides whether a failed observation is the expected
  conflict or a real failure
"""

from __future__ import annotations

from typing import Any

from isoprobe.core.constants import is_conflict_message
from isoprobe.core.exceptions import OutcomeMismatchError, QueryError
from isoprobe.core.logging import get_logger
from isoprobe.models.enums import Engine, Outcome

logger = get_logger(__name__)


def assert_consistency(before: Any, after: Any, expected: Outcome) -> Outcome:
    """Check two observations against ``expected``.

    Fails iff the values are equal and ``inconsistent`` was expected, or they
    differ and ``consistent`` was expected. ``error`` is not evaluated here.

    Returns:
        The observed outcome (consistent or inconsistent)

    Raises:
        OutcomeMismatchError: If the observation contradicts ``expected``
    """
    observed = Outcome.CONSISTENT if before == after else Outcome.INCONSISTENT

    if (observed is Outcome.CONSISTENT and expected is Outcome.INCONSISTENT) or (
        observed is Outcome.INCONSISTENT and expected is Outcome.CONSISTENT
    ):
        raise OutcomeMismatchError(expected.value, before=before, after=after)

    if expected is Outcome.ERROR:
        logger.warning(
            f"Expected a conflict error but the read succeeded ({observed.value})",
            extra={"before": before, "after": after},
        )

    return observed


def classify_error(error: Exception, expected: Outcome, engine: Engine) -> Outcome:
    """Accept ``error`` as the expected conflict or re-raise it.

    Args:
        error: The error raised by the observation
        expected: Outcome the scenario expects
        engine: Engine whose canonical conflict text applies

    Returns:
        ``Outcome.ERROR`` when the error is the expected conflict

    Raises:
        The original ``error`` unchanged when it was not expected or its
        message is not exactly the engine's conflict text
    """
    if expected is not Outcome.ERROR:
        raise error

    if not isinstance(error, QueryError) or not is_conflict_message(engine, error.native_message):
        raise error

    logger.info(f"Expected conflict observed: {error.native_message}")
    return Outcome.ERROR
