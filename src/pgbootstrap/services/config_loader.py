"""Configuration loading for pgbootstrap: YAML files and environment variables."""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from pgbootstrap.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_POOL_MAX_SIZE,
    DEFAULT_POOL_MIN_SIZE,
    DEFAULT_POOL_OPEN_TIMEOUT,
    MAX_PORT,
    MIN_PORT,
    OPTIONAL_SETTINGS,
    REQUIRED_SETTINGS,
)
from pgbootstrap.errors import ConfigMissingError, ConfigParseError, ConfigurationError
from pgbootstrap.errors_catalog import actionable_error
from pgbootstrap.models import (
    ApplicationIdentity,
    BootstrapConfig,
    ConnectionTarget,
    PoolSettings,
    RootIdentity,
)

ENV_VARIABLES = {**REQUIRED_SETTINGS, **OPTIONAL_SETTINGS}


class ConfigLoader:
    """Loads bootstrap settings and turns them into a BootstrapConfig."""

    SUPPORTED_KEYS = set(ENV_VARIABLES)

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid config file '{config_path}': {exc}", cause=exc) from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(str(key) for key in unknown)
            raise ConfigurationError(f"Unknown configuration keys: {unknown_list}")

        return parsed

    def from_environ(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Collect the settings present in the environment, keyed like the config file."""
        environ = os.environ if environ is None else environ
        return {key: environ[name] for key, name in ENV_VARIABLES.items() if name in environ}

    def build(self, values: Mapping[str, Any]) -> BootstrapConfig:
        for key, variable in REQUIRED_SETTINGS.items():
            if values.get(key) is None:
                raise ConfigMissingError(
                    actionable_error(
                        "missing_setting",
                        key=key,
                        variable=variable,
                        option="--" + key.replace("_", "-"),
                    ),
                    variable=variable,
                )

        port = self._parse_number(values, "database_port", low=MIN_PORT, high=MAX_PORT)
        connect_timeout = self._parse_number(
            values, "database_connect_timeout", default=DEFAULT_CONNECT_TIMEOUT, low=0
        )
        open_timeout = self._parse_number(
            values,
            "pool_open_timeout",
            default=DEFAULT_POOL_OPEN_TIMEOUT,
            low=0,
            number_type=float,
        )
        min_size = self._parse_number(values, "pool_min_size", default=DEFAULT_POOL_MIN_SIZE, low=0)
        max_size = self._parse_number(values, "pool_max_size", default=DEFAULT_POOL_MAX_SIZE, low=1)
        if max_size < min_size:
            raise ConfigParseError(
                f"Setting `pool_max_size` ({max_size}) must not be lower than "
                f"`pool_min_size` ({min_size}).",
                variable=ENV_VARIABLES["pool_max_size"],
                value=max_size,
            )

        sslmode = values.get("database_sslmode")
        return BootstrapConfig(
            root=RootIdentity(
                username=str(values["root_username"]),
                password=str(values["root_password"]),
                database_name=str(values["root_database"]),
            ),
            application=ApplicationIdentity(
                username=str(values["app_username"]),
                password=str(values["app_password"]),
                database_name=str(values["app_database"]),
            ),
            target=ConnectionTarget(
                host=str(values["database_host"]),
                port=port,
                connect_timeout=connect_timeout,
                sslmode=str(sslmode) if sslmode else None,
            ),
            pool=PoolSettings(min_size=min_size, max_size=max_size, open_timeout=open_timeout),
        )

    @staticmethod
    def _parse_number(
        values: Mapping[str, Any],
        key: str,
        default=None,
        low: Optional[int] = None,
        high: Optional[int] = None,
        number_type=int,
    ):
        raw = values.get(key)
        if raw is None or raw == "":
            if default is None:
                raise ConfigMissingError(
                    actionable_error(
                        "missing_setting",
                        key=key,
                        variable=ENV_VARIABLES[key],
                        option="--" + key.replace("_", "-"),
                    ),
                    variable=ENV_VARIABLES[key],
                )
            return default

        variable = ENV_VARIABLES[key]
        error_code = "invalid_integer" if number_type is int else "invalid_number"
        if isinstance(raw, bool):
            raise ConfigParseError(
                actionable_error(error_code, key=key, variable=variable, value=raw),
                variable=variable,
                value=raw,
            )
        try:
            number = number_type(str(raw).strip())
        except ValueError as exc:
            raise ConfigParseError(
                actionable_error(error_code, key=key, variable=variable, value=raw),
                variable=variable,
                value=raw,
                cause=exc,
            ) from exc

        if (low is not None and number < low) or (high is not None and number > high):
            raise ConfigParseError(
                actionable_error(
                    "out_of_range",
                    key=key,
                    variable=variable,
                    value=number,
                    low=low,
                    high=high if high is not None else "unbounded",
                ),
                variable=variable,
                value=raw,
            )
        return number


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> BootstrapConfig:
    """Build a BootstrapConfig from ROOT_*, APP_* and DATABASE_* variables."""
    loader = ConfigLoader()
    return loader.build(loader.from_environ(environ))
