"""Domain errors for pgbootstrap."""

from typing import Optional


class BootstrapError(RuntimeError):
    """Raised when the bootstrap cannot continue safely."""

    kind = "bootstrap"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(BootstrapError):
    """Raised before any connection is attempted when settings are unusable."""

    kind = "configuration"


class ConfigMissingError(ConfigurationError):
    kind = "config_missing"

    def __init__(self, message: str, variable: str):
        super().__init__(message)
        self.variable = variable


class ConfigParseError(ConfigurationError):
    kind = "config_parse_failed"

    def __init__(
        self,
        message: str,
        variable: str,
        value: object = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.variable = variable
        self.value = value


class ConnectionFailedError(BootstrapError):
    """Raised when the root connection or the application pool cannot be opened."""

    kind = "connection_failed"

    def __init__(self, message: str, identity: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.identity = identity


class StatementFailedError(BootstrapError):
    """Raised when a provisioning statement is rejected by the server."""

    kind = "statement_failed"

    def __init__(self, message: str, statement: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.statement = statement
