"""
Configuration validation utilities.

Environment lookups and path checks with helpful error messages.
"""
import os
import warnings
from typing import Optional
from .exceptions import ConfigurationError


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get optional environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Environment variable value or default
    """
    value = os.getenv(key, default)

    if value and _is_placeholder(value):
        # Warn but don't fail for optional configs
        warnings.warn(
            f"{key} appears to be a placeholder. Using default or None.",
            UserWarning
        )
        return default

    return value


def get_float_env(key: str, default: Optional[float]) -> Optional[float]:
    """
    Get a float environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Parsed float
    :raises: ConfigurationError if the value is not a number
    """
    raw = get_optional_env(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got '{raw}'")


def get_bool_env(key: str, default: bool) -> bool:
    """Get a boolean environment variable ("true"/"false")."""
    raw = get_optional_env(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def validate_positive(value: float, name: str) -> float:
    """
    Validate that a numeric setting is strictly positive.

    :raises: ConfigurationError if value <= 0
    """
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than 0, got {value}")
    return value


def validate_unit_interval(value: float, name: str) -> float:
    """
    Validate that a threshold lies in [0, 1].

    :raises: ConfigurationError if out of range
    """
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")
    return value


def _is_placeholder(value: str) -> bool:
    """Check if value is a placeholder."""
    if not value:
        return False

    placeholder_patterns = [
        "your_",
        "placeholder",
        "xxx",
        "replace",
        "TODO",
    ]

    value_lower = value.lower()
    return any(pattern.lower() in value_lower for pattern in placeholder_patterns)


def validate_path(path: str, path_name: str, must_exist: bool = False) -> str:
    """
    Validate file/directory path.

    :param path: Path to validate
    :param path_name: Name of the path (for error messages)
    :param must_exist: Whether path must exist
    :return: Validated path
    :raises: ConfigurationError if invalid
    """
    if not path:
        raise ConfigurationError(f"{path_name} is required.")

    if must_exist and not os.path.exists(path):
        raise ConfigurationError(
            f"{path_name} does not exist: {path}\n"
            f"Please check the path and ensure the file/directory exists."
        )

    return path
