"""Fake sessions and providers for testing without live engines.

Usage:
    from isoprobe.tests.mock_utils import SessionRecorder, make_provider

    recorder = SessionRecorder(
        Engine.POSTGRES,
        roles={"a": {SELECT_ROW: [[{"a": 1, "b": 1}], [{"a": 1, "b": 10}]]}},
    )
    provider = make_provider(recorder)
    ...
    assert recorder.journal[0] == ("fixture", "DROP TABLE IF EXISTS test")
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from isoprobe.core.config import ConnectionConfig
from isoprobe.models.enums import Engine, IsolationLevel
from isoprobe.services.connection import SessionProvider

# Order in which the orchestrator opens sessions for one case
ROLES = ("fixture", "a", "b")


class FakeSession:
    """In-memory ``SessionProtocol`` that records every call.

    Args:
        name: Label used in the journal
        engine: Engine reported by the session
        responses: Results per SQL text, consumed in order
        errors: Exception per SQL text, raised once
        journal: Shared list of ``(name, action)`` tuples, for ordering checks
        close_error: Raised from every ``close`` call when set
        begin_error: Raised from ``begin_transaction`` when set
    """

    def __init__(
        self,
        name: str,
        engine: Engine = Engine.POSTGRES,
        *,
        responses: Mapping[str, Iterable[list[dict[str, Any]]]] | None = None,
        errors: Mapping[str, Exception] | None = None,
        journal: list[tuple[str, str]] | None = None,
        close_error: Exception | None = None,
        begin_error: Exception | None = None,
    ) -> None:
        self.name = name
        self._engine = engine
        self._responses = {sql: deque(results) for sql, results in (responses or {}).items()}
        self._errors = dict(errors or {})
        self.journal = journal if journal is not None else []
        self.close_error = close_error
        self.begin_error = begin_error
        self.statements: list[str] = []
        self.isolation_level: IsolationLevel | None = None
        self.close_calls = 0

    @property
    def engine(self) -> Engine:
        return self._engine

    async def execute(self, sql: str) -> list[dict[str, Any]]:
        self.journal.append((self.name, sql))
        self.statements.append(sql)
        if sql in self._errors:
            raise self._errors.pop(sql)
        queue = self._responses.get(sql)
        if queue:
            return queue.popleft()
        return []

    async def begin_transaction(self, level: IsolationLevel) -> None:
        self.journal.append((self.name, f"BEGIN {level.value}"))
        if self.begin_error is not None:
            raise self.begin_error
        self.isolation_level = level

    async def close(self) -> None:
        self.close_calls += 1
        self.journal.append((self.name, "CLOSE"))
        if self.close_error is not None:
            raise self.close_error


def make_config(engine: Engine = Engine.POSTGRES) -> ConnectionConfig:
    return ConnectionConfig(
        engine=engine,
        host="db.test",
        port=5432 if engine is Engine.POSTGRES else 3306,
        user="tester",
        password="s3cret",
        database="test",
        connect_timeout=1.0,
    )


class SessionRecorder:
    """Session factory handing out ``FakeSession`` objects by role.

    The n-th opened session gets role ``ROLES[n % 3]`` so one recorder can
    serve several consecutive cases.
    """

    def __init__(
        self,
        engine: Engine,
        roles: Mapping[str, Mapping[str, Iterable[list[dict[str, Any]]]]] | None = None,
        *,
        errors: Mapping[str, Mapping[str, Exception]] | None = None,
        close_errors: Mapping[str, Exception] | None = None,
        begin_errors: Mapping[str, Exception] | None = None,
        open_errors: Mapping[str, Exception] | None = None,
        journal: list[tuple[str, str]] | None = None,
    ) -> None:
        self.engine = engine
        self.roles = {role: dict(responses) for role, responses in (roles or {}).items()}
        self.errors = {role: dict(errs) for role, errs in (errors or {}).items()}
        self.close_errors = dict(close_errors or {})
        self.begin_errors = dict(begin_errors or {})
        self.open_errors = dict(open_errors or {})
        self.journal = journal if journal is not None else []
        self.sessions: list[FakeSession] = []
        self._opens = 0

    async def __call__(self, config: ConnectionConfig) -> FakeSession:
        role = ROLES[self._opens % len(ROLES)]
        self._opens += 1
        if role in self.open_errors:
            raise self.open_errors[role]
        session = FakeSession(
            role,
            self.engine,
            responses={sql: list(results) for sql, results in self.roles.get(role, {}).items()},
            errors=self.errors.get(role),
            journal=self.journal,
            close_error=self.close_errors.get(role),
            begin_error=self.begin_errors.get(role),
        )
        self.sessions.append(session)
        return session

    def by_role(self, role: str) -> list[FakeSession]:
        return [session for session in self.sessions if session.name == role]


def make_provider(recorder: SessionRecorder) -> SessionProvider:
    """Build a real ``SessionProvider`` whose factory is ``recorder``."""
    return SessionProvider(
        {recorder.engine: make_config(recorder.engine)},
        factories={recorder.engine: recorder},
    )
