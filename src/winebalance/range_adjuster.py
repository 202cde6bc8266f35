"""
Dynamic range adjustment.

Moves each characteristic's ideal window according to where the other
characteristics sit relative to their baseline midpoints. A wine with high
acidity, for instance, wants a lower sweetness window.
"""

import logging
from typing import Mapping, Optional

from winebalance.constants import CHARACTERISTICS, AlgorithmConstants, Direction
from winebalance.schema import (
    CharacteristicVector,
    RangeAdjustmentConfig,
    RangeBounds,
    RangeShiftRule,
    RangeTable,
    copy_ranges,
)
from winebalance.utils import clamp01, floored_width, midpoint

logger = logging.getLogger(__name__)


def deviation_pct(value: float, base_range: RangeBounds) -> float:
    """
    Signed deviation of value from the baseline midpoint, in full widths.

    Roughly -0.5..+0.5 while value stays inside its baseline range.
    """
    low, high = base_range
    full_range = floored_width(low, high, AlgorithmConstants.WIDTH_EPSILON)
    return (value - midpoint(low, high)) / full_range


def enforce_min_width(low: float, high: float) -> RangeBounds:
    """
    Recentre a window narrower than MIN_RANGE_WIDTH to exactly that width.

    The recentred window is slid back inside [0, 1] instead of being cut
    at the bound.
    """
    width = AlgorithmConstants.MIN_RANGE_WIDTH
    if high - low >= width:
        return low, high

    center = min(1.0 - width / 2, max(width / 2, midpoint(low, high)))
    logger.warning(f"Window [{low:.4f}, {high:.4f}] too narrow, recentred on {center:.4f}")
    return center - width / 2, center + width / 2


def shift_range(
    current: RangeBounds,
    rule: RangeShiftRule,
    deviation: float
) -> RangeBounds:
    """
    Apply one shift rule to a target's current window.

    delta = shift_per_unit * deviation * current width; both bounds move by
    delta, then get clamped to the rule's clamp (if any) and to [0, 1].
    """
    low, high = current
    target_width = floored_width(low, high, AlgorithmConstants.WIDTH_EPSILON)
    delta = rule.shift_per_unit * deviation * target_width

    new_low = low + delta
    new_high = high + delta

    if rule.clamp is not None:
        new_low = max(rule.clamp[0], new_low)
        new_high = min(rule.clamp[1], new_high)

    new_low = clamp01(new_low)
    new_high = clamp01(new_high)

    return enforce_min_width(new_low, new_high)


def apply_dynamic_range_adjustments(
    characteristics: CharacteristicVector,
    base_ranges: Mapping[str, RangeBounds],
    config: Optional[RangeAdjustmentConfig] = None
) -> RangeTable:
    """
    Derive adjusted ideal ranges for the given wine.

    Sources are processed in canonical characteristic order and each shift
    reads the target's already-adjusted window, so shifts from several
    sources onto one target accumulate in that order.

    Args:
        characteristics: Wine characteristic dict
        base_ranges: Baseline ranges (never modified)
        config: {source: {direction: [RangeShiftRule]}}; None means no shifts

    Returns:
        New RangeTable of adjusted windows
    """
    adjusted = copy_ranges(base_ranges)
    if not config:
        return adjusted

    for source in CHARACTERISTICS:
        source_config = config.get(source)
        if not source_config:
            continue

        deviation = deviation_pct(characteristics[source], base_ranges[source])
        if abs(deviation) < AlgorithmConstants.DEVIATION_EPSILON:
            continue

        direction = Direction.ABOVE.value if deviation > 0 else Direction.BELOW.value
        for rule in source_config.get(direction) or []:
            before = adjusted[rule.target]
            adjusted[rule.target] = shift_range(before, rule, deviation)
            logger.debug(
                f"{source} {direction} ({deviation:+.3f}) shifted {rule.target} "
                f"[{before[0]:.4f}, {before[1]:.4f}] -> "
                f"[{adjusted[rule.target][0]:.4f}, {adjusted[rule.target][1]:.4f}]"
            )

    return adjusted
