"""
Wine Balance Constants and Enums

Centralized constants, enums, and magic values used by the balance engine.
"""

from enum import Enum


# =======================
# WINE CHARACTERISTIC ENUMS
# =======================

class Characteristic(str, Enum):
    """The six scored wine characteristics (0-1 scale)."""
    ACIDITY = "acidity"
    AROMA = "aroma"
    BODY = "body"
    SPICE = "spice"
    SWEETNESS = "sweetness"
    TANNINS = "tannins"

    @classmethod
    def names(cls) -> tuple:
        """Characteristic names in canonical order."""
        return tuple(c.value for c in cls)


class Direction(str, Enum):
    """Side of the baseline midpoint a characteristic sits on."""
    ABOVE = "above"
    BELOW = "below"


class RuleKind(str, Enum):
    """Penalties amplify distance, synergies shrink it."""
    PENALTY = "penalty"
    SYNERGY = "synergy"


class GrapeVariety(str, Enum):
    """Grape varieties with known base characteristics."""
    BARBERA = "Barbera"
    CHARDONNAY = "Chardonnay"
    PINOT_NOIR = "Pinot Noir"
    PRIMITIVO = "Primitivo"
    SAUVIGNON_BLANC = "Sauvignon Blanc"
    TEMPRANILLO = "Tempranillo"


# Canonical iteration order. Range shifts chain in this order.
CHARACTERISTICS = Characteristic.names()


# =======================
# ALGORITHM CONSTANTS
# =======================

class AlgorithmConstants:
    """
    Algorithm constants with documentation.
    """

    # DIVISION GUARDS
    # Floor for range widths and half-widths before dividing by them
    WIDTH_EPSILON = 0.0001

    # Deviations smaller than this count as "at baseline" (no range shift)
    DEVIATION_EPSILON = 1e-6

    # RANGE ADJUSTMENT
    # Narrowest target window a shift may produce; narrower ones are recentred
    MIN_RANGE_WIDTH = 0.02

    # RULE SCALING DEFAULTS
    # effect = k * avg_deviation ** p, capped at cap
    DEFAULT_K = 0.2
    DEFAULT_P = 1.2
    DEFAULT_PENALTY_CAP = 2.0
    DEFAULT_SYNERGY_CAP = 0.75

    # SCORING
    # Distance outside the adjusted range counts this many times extra
    OUTSIDE_PENALTY_FACTOR = 2.0

    # score = max(0, 1 - average_distance * SCORE_DISTANCE_FACTOR)
    SCORE_DISTANCE_FACTOR = 2.0

    @classmethod
    def default_cap(cls, kind: RuleKind) -> float:
        """Default cap for a rule kind."""
        if kind == RuleKind.PENALTY:
            return cls.DEFAULT_PENALTY_CAP
        return cls.DEFAULT_SYNERGY_CAP


# =======================
# UI CONSTANTS
# =======================

class UIConstants:
    """UI-related constants."""

    FEATURE_LABELS = {
        'acidity': 'Acidity',
        'aroma': 'Aroma',
        'body': 'Body',
        'spice': 'Spice',
        'sweetness': 'Sweetness',
        'tannins': 'Tannins'
    }

    # Fixed-point precision used when rendering scores and ranges
    DISPLAY_PRECISION = 4
