"""
Standardized Error Handling for the balance engine

Scoring itself is total over numeric input; errors only arise while
loading and validating the static configuration.
"""

import logging
from typing import Any, Dict, List
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class BalanceError(Exception):
    """Base exception for the balance engine."""
    pass


class ConfigurationError(BalanceError):
    """Invalid range tables, shift rules or penalty/synergy rules."""
    pass


def handle_config_error(error: Exception, operation: str) -> None:
    """
    Standardized configuration error handling.

    Logs the failure and re-raises it as a ConfigurationError so callers
    only have to catch one type.

    Args:
        error: Exception that occurred
        operation: Description of operation

    Raises:
        ConfigurationError: always
    """
    if isinstance(error, ValidationError):
        logger.error(f"Configuration validation failed during {operation}: {error}")
        raise ConfigurationError(f"Invalid configuration during {operation}: {error}") from error

    if isinstance(error, (KeyError, TypeError)):
        logger.error(f"Malformed configuration during {operation}: {type(error).__name__} - {error}")
        raise ConfigurationError(f"Malformed configuration during {operation}") from error

    logger.error(f"Unexpected error during {operation}: {type(error).__name__} - {error}")
    raise ConfigurationError(f"Unexpected error during {operation}") from error


def missing_keys(data: Dict[str, Any], expected_keys: List[str]) -> List[str]:
    """
    Keys from expected_keys absent in data.

    Args:
        data: Mapping to inspect
        expected_keys: Required keys

    Returns:
        Missing keys in expected order (empty when complete)
    """
    return [key for key in expected_keys if key not in data]


# Export key functions and classes
__all__ = [
    'BalanceError',
    'ConfigurationError',
    'handle_config_error',
    'missing_keys'
]
