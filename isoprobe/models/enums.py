"""Enumeration types for the isolation probe harness."""

from enum import Enum


class Engine(str, Enum):
    """Database engine variants the harness can probe.

    - MYSQL: InnoDB, lock-based concurrency control
    - POSTGRES: PostgreSQL, multi-version concurrency control
    """

    MYSQL = "mysql"
    POSTGRES = "pg"

    def __str__(self) -> str:
        return self.value


class IsolationLevel(str, Enum):
    """Transaction isolation levels.

    Values are the SQL spelling used in ``SET TRANSACTION ISOLATION LEVEL``.
    """

    READ_UNCOMMITTED = "read uncommitted"
    READ_COMMITTED = "read committed"
    REPEATABLE_READ = "repeatable read"
    SERIALIZABLE = "serializable"

    def __str__(self) -> str:
        return self.value


class Outcome(str, Enum):
    """Classification of a before/after comparison.

    - CONSISTENT: both observations are equal
    - INCONSISTENT: the second observation differs from the first
    - ERROR: the second observation failed with the engine's conflict error
    """

    CONSISTENT = "consistent"
    INCONSISTENT = "inconsistent"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class ScenarioKind(str, Enum):
    """Anomaly probes the harness knows how to run."""

    DIRTY_READ = "dirty_read"
    FUZZY_READ = "fuzzy_read"
    LOCKING_FUZZY_READ = "locking_fuzzy_read"
    PHANTOM_READ = "phantom_read"

    def __str__(self) -> str:
        return self.value
