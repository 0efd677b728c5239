"""Session drivers, orchestration and anomaly probes."""

from .catalog import CATALOG, run_case, run_catalog, select_cases
from .connection import SessionProvider, get_session_factory, register_engine
from .mysql_session import MySQLSession
from .orchestrator import close_sessions, reset_fixture, with_sessions
from .outcome import assert_consistency, classify_error
from .postgres_session import PostgresSession
from .scenarios import (
    SCENARIOS,
    dirty_read,
    fuzzy_read,
    get_scenario,
    locking_fuzzy_read,
    phantom_read,
)
from .transaction import begin_transaction, commit, isolation_level_statement

__all__ = [
    "CATALOG",
    "SCENARIOS",
    "MySQLSession",
    "PostgresSession",
    "SessionProvider",
    "assert_consistency",
    "begin_transaction",
    "classify_error",
    "close_sessions",
    "commit",
    "dirty_read",
    "fuzzy_read",
    "get_scenario",
    "get_session_factory",
    "isolation_level_statement",
    "locking_fuzzy_read",
    "phantom_read",
    "register_engine",
    "reset_fixture",
    "run_case",
    "run_catalog",
    "select_cases",
    "with_sessions",
]
