"""
Utility functions for the balance engine.

Includes logging setup and interval helpers.
"""

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def clamp01(value: float) -> float:
    """Clamp a value to the unit interval."""
    return max(0.0, min(1.0, value))


def floored_width(low: float, high: float, epsilon: float) -> float:
    """Width of [low, high], never smaller than epsilon."""
    return max(epsilon, high - low)


def midpoint(low: float, high: float) -> float:
    """Centre of [low, high]."""
    return (low + high) / 2
