"""Integration test fixtures backed by live MySQL and PostgreSQL servers.

Connection details come from the same environment variables the command
uses (MYSQL_HOST, PG_HOST, ...). A test parametrized over an engine skips
when that engine's server does not accept TCP connections, so a machine
with only one of the two servers still runs half the suite.

Key fixtures:
- settings: Harness settings read from the environment
- engine_provider: Factory returning a SessionProvider for a reachable engine
"""

from __future__ import annotations

import socket

import pytest

from isoprobe.core.config import Settings
from isoprobe.models.enums import Engine
from isoprobe.services.connection import SessionProvider


def _check_tcp_connection(host: str, port: int) -> bool:
    """Check if a TCP service is reachable on the given host/port."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex((host, port))
        sock.close()
        return result == 0
    except OSError:
        return False


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings()


@pytest.fixture(scope="session")
def reachable_engines(settings: Settings) -> set[Engine]:
    """Engines whose server answers on its configured host and port."""
    configs = settings.connection_configs()
    return {
        engine
        for engine, config in configs.items()
        if _check_tcp_connection(config.host, config.port)
    }


@pytest.fixture
def engine_provider(settings: Settings, reachable_engines: set[Engine]):
    """Return a provider for ``engine``, skipping the test when it is down."""

    def _provider(engine: Engine) -> SessionProvider:
        if engine not in reachable_engines:
            config = settings.connection_config(engine)
            pytest.skip(f"{engine} not reachable at {config.host}:{config.port}")
        return SessionProvider({engine: settings.connection_config(engine)})

    return _provider
