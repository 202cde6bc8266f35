"""
Balance Engine Configuration

Static baseline ranges, range-shift rules and grape defaults, plus loaders
that validate designer-authored configuration dicts.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from winebalance.constants import CHARACTERISTICS, Direction, GrapeVariety
from winebalance.error_handling import ConfigurationError, handle_config_error, missing_keys
from winebalance.schema import (
    BalancedRange,
    CharacteristicVector,
    RangeAdjustmentConfig,
    RangeShiftRule,
    RangeTable,
    RuleConfig,
)
from winebalance.utils import midpoint

logger = logging.getLogger(__name__)


# =======================
# BASELINE RANGES
# =======================

BASE_BALANCED_RANGES: RangeTable = {
    'acidity': (0.4, 0.6),
    'aroma': (0.3, 0.7),
    'body': (0.4, 0.8),
    'spice': (0.35, 0.65),
    'sweetness': (0.4, 0.6),
    'tannins': (0.35, 0.65),
}


# =======================
# RANGE ADJUSTMENTS
# =======================

# (target, shift_per_unit, name, high description, low description)
ShiftSpec = Tuple[str, float, str, str, str]


def _both_directions(source: str, shifts: List[ShiftSpec]) -> Dict[str, List[RangeShiftRule]]:
    """Same shifts on either side of the source midpoint."""
    config = {}
    for direction in Direction:
        config[direction.value] = [
            RangeShiftRule(
                target=target,
                shift_per_unit=shift,
                name=name,
                description=high if direction == Direction.ABOVE else low,
                requirement=f"({source} {direction.value} normal)",
            )
            for target, shift, name, high, low in shifts
        ]
    return config


RANGE_ADJUSTMENTS: RangeAdjustmentConfig = {
    'acidity': _both_directions('acidity', [
        ('sweetness', -0.15, "Acidity-Sweetness Inverse",
         "High acidity reduces optimal sweetness range",
         "Low acidity affects sweetness range"),
    ]),
    'aroma': _both_directions('aroma', [
        ('body', 0.06, "Aroma-Body Correlation",
         "High aroma increases optimal body range",
         "Low aroma affects body range"),
    ]),
    'body': _both_directions('body', [
        ('spice', 0.08, "Body-Spice Correlation",
         "High body increases optimal spice range",
         "Low body affects spice range"),
        ('tannins', 0.08, "Body-Tannin Correlation",
         "High body increases optimal tannin range",
         "Low body affects tannin range"),
    ]),
    'spice': _both_directions('spice', []),
    'sweetness': _both_directions('sweetness', [
        ('acidity', -0.10, "Sweetness-Acidity Inverse",
         "High sweetness reduces optimal acidity range",
         "Low sweetness affects acidity range"),
    ]),
    'tannins': _both_directions('tannins', [
        ('body', 0.10, "Tannin-Body Correlation",
         "High tannins increase optimal body range",
         "Low tannins affect body range"),
        ('aroma', 0.08, "Tannin-Aroma Correlation",
         "High tannins increase optimal aroma range",
         "Low tannins affect aroma range"),
        ('sweetness', -0.05, "Tannin-Sweetness Inverse",
         "High tannins reduce optimal sweetness range",
         "Low tannins affect sweetness range"),
    ]),
}


# =======================
# GRAPE DEFAULTS
# =======================

GRAPE_BASE_CHARACTERISTICS: Dict[str, CharacteristicVector] = {
    GrapeVariety.BARBERA.value: {
        'acidity': 0.7, 'aroma': 0.5, 'body': 0.6, 'spice': 0.5, 'sweetness': 0.5, 'tannins': 0.6
    },
    GrapeVariety.CHARDONNAY.value: {
        'acidity': 0.4, 'aroma': 0.65, 'body': 0.75, 'spice': 0.5, 'sweetness': 0.5, 'tannins': 0.35
    },
    GrapeVariety.PINOT_NOIR.value: {
        'acidity': 0.65, 'aroma': 0.6, 'body': 0.35, 'spice': 0.5, 'sweetness': 0.5, 'tannins': 0.4
    },
    GrapeVariety.PRIMITIVO.value: {
        'acidity': 0.5, 'aroma': 0.7, 'body': 0.7, 'spice': 0.5, 'sweetness': 0.7, 'tannins': 0.7
    },
    GrapeVariety.SAUVIGNON_BLANC.value: {
        'acidity': 0.8, 'aroma': 0.75, 'body': 0.3, 'spice': 0.6, 'sweetness': 0.4, 'tannins': 0.3
    },
    GrapeVariety.TEMPRANILLO.value: {
        'acidity': 0.55, 'aroma': 0.6, 'body': 0.65, 'spice': 0.55, 'sweetness': 0.45, 'tannins': 0.65
    },
}


def default_characteristics(
    grape: Optional[str] = None,
    base_ranges: Mapping[str, Tuple[float, float]] = BASE_BALANCED_RANGES
) -> CharacteristicVector:
    """
    Starting characteristics for a grape variety.

    Unknown grapes (or None) fall back to the midpoint of each baseline range.

    Args:
        grape: Grape variety name, e.g. "Pinot Noir"
        base_ranges: Baseline ranges used for the fallback

    Returns:
        Fresh characteristic dict
    """
    if isinstance(grape, GrapeVariety):
        grape = grape.value

    if grape in GRAPE_BASE_CHARACTERISTICS:
        return dict(GRAPE_BASE_CHARACTERISTICS[grape])

    if grape is not None:
        logger.info(f"No base characteristics for grape '{grape}', using balanced midpoints")

    return {name: midpoint(*base_ranges[name]) for name in CHARACTERISTICS}


# =======================
# LOADERS
# =======================

def load_base_ranges(data: Mapping[str, Sequence[float]]) -> RangeTable:
    """
    Validate a baseline range table.

    Args:
        data: {characteristic: (min, max)} for all six characteristics

    Returns:
        RangeTable in canonical order

    Raises:
        ConfigurationError: missing characteristic, unknown key or bad bounds
    """
    missing = missing_keys(dict(data), list(CHARACTERISTICS))
    if missing:
        logger.error(f"Baseline ranges missing characteristics: {missing}")
        raise ConfigurationError(f"Baseline ranges missing characteristics: {missing}")

    unknown = [key for key in data if key not in CHARACTERISTICS]
    if unknown:
        raise ConfigurationError(f"Unknown characteristics in baseline ranges: {unknown}")

    table = {}
    for name in CHARACTERISTICS:
        try:
            low, high = data[name]
            table[name] = BalancedRange(low=low, high=high).as_tuple()
        except (ValidationError, TypeError, ValueError) as e:
            handle_config_error(e, f"loading baseline range for {name}")
    return table


def load_range_adjustments(data: Mapping[str, Mapping[str, Any]]) -> RangeAdjustmentConfig:
    """
    Validate range-shift configuration.

    Accepts {source: {direction: [rule, ...]}} where each direction may also
    be written as {"range_shifts": [rule, ...]}. Rules may be dicts or
    RangeShiftRule instances.

    Raises:
        ConfigurationError: unknown source or direction, or an invalid rule
    """
    directions = [d.value for d in Direction]
    config: RangeAdjustmentConfig = {}

    for source, by_direction in data.items():
        if source not in CHARACTERISTICS:
            raise ConfigurationError(f"Unknown range adjustment source: {source}")

        config[source] = {}
        for direction, shifts in by_direction.items():
            if direction not in directions:
                raise ConfigurationError(f"Unknown direction '{direction}' for {source}")

            if isinstance(shifts, Mapping):
                shifts = shifts.get('range_shifts', [])

            try:
                config[source][direction] = [
                    rule if isinstance(rule, RangeShiftRule) else RangeShiftRule.model_validate(rule)
                    for rule in shifts
                ]
            except (ValidationError, TypeError) as e:
                handle_config_error(e, f"loading range shifts for {source}/{direction}")

    logger.debug(f"Loaded range adjustments for {len(config)} sources")
    return config


def load_rule_config(data: Mapping[str, Any]) -> RuleConfig:
    """
    Validate penalty/synergy rule configuration.

    Args:
        data: {"penalties": [...], "synergies": [...]}; each rule needs a
              callable "condition"

    Raises:
        ConfigurationError: invalid rule definitions
    """
    if isinstance(data, RuleConfig):
        return data

    try:
        config = RuleConfig.model_validate(dict(data))
    except (ValidationError, TypeError) as e:
        handle_config_error(e, "loading rule configuration")

    logger.debug(
        f"Loaded {len(config.penalties)} penalty rules and {len(config.synergies)} synergy rules"
    )
    return config
