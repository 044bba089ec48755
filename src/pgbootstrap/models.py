"""Shared domain models for pgbootstrap."""

from dataclasses import dataclass, field
from typing import Optional

from .constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_POOL_MAX_SIZE,
    DEFAULT_POOL_MIN_SIZE,
    DEFAULT_POOL_OPEN_TIMEOUT,
)


@dataclass(frozen=True)
class RootIdentity:
    """Privileged principal, used only to open the provisioning connection."""

    username: str
    password: str = field(repr=False)
    database_name: str


@dataclass(frozen=True)
class ApplicationIdentity:
    """Least-privilege principal handed to the application after bootstrap."""

    username: str
    password: str = field(repr=False)
    database_name: str


@dataclass(frozen=True)
class ConnectionTarget:
    host: str
    port: int
    connect_timeout: Optional[int] = DEFAULT_CONNECT_TIMEOUT
    sslmode: Optional[str] = None


@dataclass(frozen=True)
class PoolSettings:
    min_size: int = DEFAULT_POOL_MIN_SIZE
    max_size: int = DEFAULT_POOL_MAX_SIZE
    open_timeout: float = DEFAULT_POOL_OPEN_TIMEOUT


@dataclass(frozen=True)
class BootstrapConfig:
    """Everything a bootstrap run needs. Owns no connections."""

    root: RootIdentity
    application: ApplicationIdentity
    target: ConnectionTarget
    pool: PoolSettings = field(default_factory=PoolSettings)


@dataclass(frozen=True)
class BootstrapEvent:
    """Structured notice emitted while provisioning."""

    kind: str
    subject: str
    detail: str = ""


ROLE_EXISTS = "role_exists"
ROLE_CREATED = "role_created"
DATABASE_EXISTS = "database_exists"
MEMBERSHIP_GRANTED = "membership_granted"
DATABASE_CREATED = "database_created"
MEMBERSHIP_REVOKED = "membership_revoked"
POOL_OPENED = "pool_opened"
