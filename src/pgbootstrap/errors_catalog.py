"""Actionable error catalog for pgbootstrap."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "missing_setting": {
        "what": "Missing required setting `{key}`.",
        "next": "Export `{variable}`, add `{key}` to the config file or pass `{option}`.",
    },
    "invalid_integer": {
        "what": "Setting `{key}` must be an integer, got {value!r}.",
        "next": "Fix `{variable}` (or `{key}` in the config file) and retry.",
    },
    "invalid_number": {
        "what": "Setting `{key}` must be a number, got {value!r}.",
        "next": "Fix `{variable}` (or `{key}` in the config file) and retry.",
    },
    "out_of_range": {
        "what": "Setting `{key}` must be between {low} and {high}, got {value}.",
        "next": "Fix `{variable}` (or `{key}` in the config file) and retry.",
    },
    "invalid_identifier": {
        "what": "{label} {reason}",
        "next": "Use a name of at most 63 bytes without NUL characters.",
    },
    "root_connection_failed": {
        "what": "Could not connect to {host}:{port}/{database} as root user `{username}`: {error}",
        "next": "Check DATABASE_HOST/DATABASE_PORT and the root credentials.",
    },
    "application_connection_failed": {
        "what": "Could not open the application pool on {host}:{port}/{database} as `{username}`: {error}",
        "next": "Check that the server accepts password logins for the application role.",
    },
    "statement_failed": {
        "what": "Statement `{statement}` failed: {error}",
        "next": "Check that the root role may create roles and databases, then rerun the bootstrap.",
    },
    "revoke_failed": {
        "what": "Statement `{statement}` failed: {error}",
        "next": "The temporary membership is still granted. Run `{statement}` manually.",
    },
}


def actionable_error(code: str, **kwargs: object) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
