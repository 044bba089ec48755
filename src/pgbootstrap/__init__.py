"""
pgbootstrap - Idempotent PostgreSQL role and database bootstrap
"""

__version__ = "0.1.0"

from .core import Bootstrapper
from .errors import (
    BootstrapError,
    ConfigMissingError,
    ConfigParseError,
    ConfigurationError,
    ConnectionFailedError,
    StatementFailedError,
)
from .models import (
    ApplicationIdentity,
    BootstrapConfig,
    BootstrapEvent,
    ConnectionTarget,
    PoolSettings,
    RootIdentity,
)
from .services.config_loader import config_from_env

__all__ = [
    "ApplicationIdentity",
    "BootstrapConfig",
    "BootstrapError",
    "BootstrapEvent",
    "Bootstrapper",
    "ConfigMissingError",
    "ConfigParseError",
    "ConfigurationError",
    "ConnectionFailedError",
    "ConnectionTarget",
    "PoolSettings",
    "RootIdentity",
    "StatementFailedError",
    "config_from_env",
]
