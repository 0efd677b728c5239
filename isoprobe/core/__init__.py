"""Core infrastructure components."""

from isoprobe.core.config import ConnectionConfig, Settings, get_settings
from isoprobe.core.logging import (
    get_logger,
    get_scenario_label,
    set_scenario_label,
    setup_logging,
)
from isoprobe.core.protocols import SessionFactory, SessionProtocol

__all__ = [
    "ConnectionConfig",
    "SessionFactory",
    "SessionProtocol",
    "Settings",
    "get_logger",
    "get_scenario_label",
    "get_settings",
    "set_scenario_label",
    "setup_logging",
]
