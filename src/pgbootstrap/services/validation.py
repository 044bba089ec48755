"""Identifier and credential validation for pgbootstrap."""

from pgbootstrap.constants import MAX_IDENTIFIER_BYTES
from pgbootstrap.errors import ConfigurationError
from pgbootstrap.errors_catalog import actionable_error


class ValidationService:
    """Rejects names and passwords that cannot be provisioned safely.

    Names are always quoted with ``psycopg.sql`` before they reach the server;
    these checks catch the values that quoting cannot make correct: empty names,
    NUL characters and names the server would silently truncate, which would
    make the catalog lookups miss the object they just created.
    """

    def validate_identifier(self, value: str, label: str) -> str:
        if not isinstance(value, str) or not value:
            raise ConfigurationError(
                actionable_error("invalid_identifier", label=label, reason="must not be empty.")
            )
        if "\x00" in value:
            raise ConfigurationError(
                actionable_error(
                    "invalid_identifier", label=label, reason="contains a NUL character."
                )
            )
        if len(value.encode("utf-8")) > MAX_IDENTIFIER_BYTES:
            raise ConfigurationError(
                actionable_error(
                    "invalid_identifier",
                    label=label,
                    reason=f"is longer than {MAX_IDENTIFIER_BYTES} bytes.",
                )
            )
        return value

    def validate_password(self, value: str, label: str) -> str:
        if not isinstance(value, str):
            raise ConfigurationError(f"{label} must be a string.")
        if "\x00" in value:
            raise ConfigurationError(f"{label} contains a NUL character.")
        return value

    def validate_config(self, config) -> None:
        self.validate_identifier(config.root.username, "Root username")
        self.validate_identifier(config.root.database_name, "Root database")
        self.validate_identifier(config.application.username, "Application username")
        self.validate_identifier(config.application.database_name, "Application database")
        self.validate_password(config.root.password, "Root password")
        self.validate_password(config.application.password, "Application password")
