"""Type utilities for configuration processing.

Each helper converts a raw YAML value and raises `ConfigError`, naming the
offending key, when it cannot.
"""

import datetime

from .exceptions import ConfigError


def force_list(val) -> list:
    """
    Ensure the value is a list.
    """
    return list(val) if isinstance(val, (list, tuple)) else [val]


def force_int(key, value) -> int:
    """
    Convert value to int, raise ConfigError on failure.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to integer"
        ) from None


def force_date(key, value) -> datetime.date:
    """
    Ensure value is a datetime.date, raise ConfigError otherwise.
    """
    if not isinstance(value, datetime.date):
        raise ConfigError(f"Value `{value}` for key `{expand_key(key)}` is not a date")
    return value


def force_choice(key, value, choices) -> str:
    """
    Ensure value is one of `choices` (compared case-insensitively).
    """
    normalized = str(value).strip().lower()
    if normalized not in choices:
        raise ConfigError(
            f"Value `{value}` for key `{expand_key(key)}` must be one of "
            f"{', '.join(choices)}"
        )
    return normalized


def expand_key(key) -> str:
    """
    Expand config key for display.
    """
    return str(key).replace("_", " ").lower()
