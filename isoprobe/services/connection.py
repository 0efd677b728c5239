"""Connection provider: opens sessions to registered engine variants.

Engine variants are looked up in a registry so a new engine only needs a
session class and an entry in the conflict-message table.

Usage:
    provider = SessionProvider(settings.connection_configs())
    session = await provider.open(Engine.POSTGRES)
    try:
        ...
    finally:
        await session.close()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from isoprobe.core.exceptions import ConfigurationError, UnknownEngineError
from isoprobe.core.logging import get_logger
from isoprobe.models.enums import Engine
from isoprobe.services.mysql_session import MySQLSession
from isoprobe.services.postgres_session import PostgresSession

if TYPE_CHECKING:
    from isoprobe.core.config import ConnectionConfig
    from isoprobe.core.protocols import SessionFactory, SessionProtocol

logger = get_logger(__name__)

_SESSION_FACTORIES: dict[Engine, SessionFactory] = {
    Engine.MYSQL: MySQLSession.connect,
    Engine.POSTGRES: PostgresSession.connect,
}


def register_engine(engine: Engine, factory: SessionFactory) -> None:
    """Register (or replace) the session factory for ``engine``."""
    _SESSION_FACTORIES[engine] = factory


def get_session_factory(engine: Engine) -> SessionFactory:
    """Get the session factory registered for ``engine``.

    Raises:
        UnknownEngineError: If no factory is registered
    """
    try:
        return _SESSION_FACTORIES[engine]
    except KeyError:
        raise UnknownEngineError(str(engine)) from None


class SessionProvider:
    """Opens sessions from explicit per-engine connection configs.

    Every call to ``open`` returns a new, independent session in the
    "open, no active transaction" state. The caller owns it and must close it.
    """

    def __init__(
        self,
        configs: Mapping[Engine, ConnectionConfig],
        factories: Mapping[Engine, SessionFactory] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            configs: Connection config per engine
            factories: Session factories overriding the registry, mainly for tests
        """
        self._configs = dict(configs)
        self._factories = dict(factories) if factories is not None else None
        self.opened = 0

    def config_for(self, engine: Engine) -> ConnectionConfig:
        try:
            return self._configs[engine]
        except KeyError:
            raise ConfigurationError(
                f"No connection config for engine '{engine}'",
                details={"engine": str(engine)},
            ) from None

    async def open(self, engine: Engine) -> SessionProtocol:
        """Open a new session to ``engine``.

        Raises:
            UnknownEngineError: If no factory is registered for the engine
            ConfigurationError: If no connection config was supplied for it
            SessionConnectionError: If the connection cannot be established
        """
        if self._factories is not None:
            factory = self._factories.get(engine)
            if factory is None:
                raise UnknownEngineError(str(engine))
        else:
            factory = get_session_factory(engine)

        config = self.config_for(engine)
        session = await factory(config)
        self.opened += 1
        logger.debug("Session opened", extra={"engine": engine.value, "host": config.host})
        return session
