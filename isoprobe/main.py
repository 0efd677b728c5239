"""Command-line entry point for the isolation probe.

Runs the scenario catalog against live engines, one case at a time, and exits
non-zero on the first failure.

Usage:
    isoprobe                         # whole catalog
    isoprobe --engine pg             # PostgreSQL cases only
    isoprobe --scenario phantom_read --list
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from isoprobe.core.config import Settings, get_settings
from isoprobe.core.exceptions import IsolationProbeError, get_exception_error_code
from isoprobe.core.logging import get_logger, sanitize_error, setup_logging
from isoprobe.models.enums import Engine, ScenarioKind
from isoprobe.models.scenario import ScenarioCase
from isoprobe.services.catalog import CATALOG, run_catalog, select_cases
from isoprobe.services.connection import SessionProvider

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="isoprobe",
        description="Probe transaction isolation anomalies on MySQL and PostgreSQL",
    )
    parser.add_argument(
        "--engine",
        action="append",
        choices=[engine.value for engine in Engine],
        help="Only run cases for this engine (repeatable)",
    )
    parser.add_argument(
        "--scenario",
        action="append",
        choices=[kind.value for kind in ScenarioKind],
        help="Only run this scenario (repeatable)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the selected cases and exit without connecting",
    )
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit console logs as JSON",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Load settings from the environment, applying command-line overrides."""
    settings = get_settings()
    overrides: dict[str, str] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.json_logs:
        overrides["log_format"] = "json"
    if overrides:
        # Re-validate so overrides go through the same field validators
        settings = Settings.model_validate({**settings.model_dump(), **overrides})
    return settings


async def run(settings: Settings, cases: Sequence[ScenarioCase]) -> int:
    """Run ``cases`` and return the process exit status."""
    provider = SessionProvider(settings.connection_configs())
    try:
        report = await run_catalog(provider, cases)
    except Exception as e:
        extra: dict[str, object] = {"error_code": get_exception_error_code(e)}
        if isinstance(e, IsolationProbeError):
            extra["error"] = e.to_dict()
        logger.exception(f"Run aborted: {sanitize_error(e)}", extra=extra)
        return 1

    logger.info(report.summary())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the isoprobe command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    cases = select_cases(
        CATALOG,
        engines=[Engine(value) for value in args.engine or []],
        kinds=[ScenarioKind(value) for value in args.scenario or []],
    )

    if args.list:
        for case in cases:
            print(case.label)
        return 0

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(settings)

    if not cases:
        logger.warning("No scenarios selected")
        return 0

    return asyncio.run(run(settings, cases))


if __name__ == "__main__":
    sys.exit(main())
