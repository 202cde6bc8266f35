"""
BalanceEngine: Wine Balance Scoring

Turns a six-dimensional characteristic vector into a 0-1 balance score:
1. Dynamic range adjustment (cross-characteristic window shifts)
2. Penalty/synergy rules (distance multipliers and reductions)
3. Distance from each adjusted ideal, averaged and mapped to a score

Every call is pure: configuration is injected and never modified, and
results are freshly built.
"""

import json
import logging
from dataclasses import asdict
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

from winebalance.config import (
    BASE_BALANCED_RANGES,
    RANGE_ADJUSTMENTS,
    load_base_ranges,
    load_range_adjustments,
    load_rule_config,
)
from winebalance.constants import CHARACTERISTICS, AlgorithmConstants, UIConstants
from winebalance.range_adjuster import apply_dynamic_range_adjustments
from winebalance.rule_evaluator import evaluate_rules, strongest_rules
from winebalance.rules import RULES
from winebalance.schema import (
    BalanceResult,
    CharacteristicCalculation,
    RangeAdjustmentConfig,
    RangeBounds,
    RangeTable,
    RuleConfig,
    RuleEvaluation,
    WineInput,
    as_vector,
)
from winebalance.utils import midpoint

logger = logging.getLogger(__name__)

_EMPTY_RULES = RuleConfig()


def characteristic_distance(
    value: float,
    adjusted_range: RangeBounds,
    scaling: float = 1.0,
    synergy_reduction: float = 0.0
) -> CharacteristicCalculation:
    """
    Distance of one characteristic from its adjusted ideal.

    total = |value - mid| + 2 * distance outside the window,
    multiplied by the penalty scaling and by (1 - synergy reduction).
    """
    low, high = adjusted_range
    distance_inside = abs(value - midpoint(low, high))
    distance_outside = max(0.0, low - value, value - high)
    penalty = AlgorithmConstants.OUTSIDE_PENALTY_FACTOR * distance_outside
    base_total = distance_inside + penalty

    return CharacteristicCalculation(
        value=value,
        adjusted_range=adjusted_range,
        distance_inside=distance_inside,
        distance_outside=distance_outside,
        penalty=penalty,
        base_total_distance=base_total,
        total_scaling_multiplier=scaling,
        synergy_reduction=synergy_reduction,
        final_total_distance=base_total * scaling * (1 - synergy_reduction),
    )


def score_from_distances(distances: Dict[str, CharacteristicCalculation]) -> float:
    """Map the mean final distance to max(0, 1 - 2 * mean)."""
    if not distances:
        return 1.0
    totals = np.array([calc.final_total_distance for calc in distances.values()])
    average = float(totals.mean())
    return max(0.0, 1 - average * AlgorithmConstants.SCORE_DISTANCE_FACTOR)


def _compute_balance(
    characteristics: WineInput,
    base_ranges: Mapping[str, RangeBounds],
    range_config: Optional[RangeAdjustmentConfig],
    rule_config: Optional[RuleConfig],
    dry_run: bool = False,
    detailed: bool = False
) -> Tuple[BalanceResult, RuleEvaluation]:
    """Shared scoring path behind both the score and the diagnostic breakdown."""
    vector = as_vector(characteristics)
    adjusted = apply_dynamic_range_adjustments(vector, base_ranges, range_config)
    evaluation = evaluate_rules(
        vector, base_ranges, rule_config or _EMPTY_RULES, dry_run=dry_run, detailed=detailed
    )

    distances = {
        name: characteristic_distance(
            vector[name],
            adjusted[name],
            evaluation.penalty_scaling[name],
            evaluation.synergy_reductions[name],
        )
        for name in CHARACTERISTICS
    }

    score = score_from_distances(distances)
    logger.debug(f"Balance score {score:.4f}")
    return BalanceResult(score=score, adjusted_ranges=adjusted, breakdown=distances), evaluation


def calculate_wine_balance(
    characteristics: WineInput,
    base_ranges: Mapping[str, RangeBounds],
    range_config: Optional[RangeAdjustmentConfig] = None,
    rule_config: Optional[RuleConfig] = None
) -> BalanceResult:
    """
    Calculate a wine's balance score.

    Args:
        characteristics: Wine characteristics (dict, Series or WineCharacteristics)
        base_ranges: Baseline ranges per characteristic
        range_config: Range-shift rules; None applies no shifts
        rule_config: Penalty/synergy rules; None applies no rules

    Returns:
        BalanceResult with score and adjusted ranges
    """
    result, _ = _compute_balance(characteristics, base_ranges, range_config, rule_config)
    return BalanceResult(score=result.score, adjusted_ranges=result.adjusted_ranges)


def calculate_characteristic_breakdown(
    characteristics: WineInput,
    base_ranges: Mapping[str, RangeBounds],
    range_config: Optional[RangeAdjustmentConfig] = None,
    rule_config: Optional[RuleConfig] = None
) -> Dict[str, CharacteristicCalculation]:
    """
    Per-characteristic intermediate terms behind calculate_wine_balance.

    Averaging final_total_distance and mapping it with 1 - 2 * mean gives
    the same score calculate_wine_balance returns for the same inputs.
    """
    result, _ = _compute_balance(characteristics, base_ranges, range_config, rule_config)
    return result.breakdown


class BalanceEngine:
    """
    Wine Balance Engine

    Holds one injected configuration (baseline ranges, range shifts and
    penalty/synergy rules) and scores wines against it. Defaults to the
    shipped tables.

    Example:
        engine = BalanceEngine()
        engine.score({'acidity': 0.9, 'aroma': 0.5, 'body': 0.5,
                      'spice': 0.5, 'sweetness': 0.9, 'tannins': 0.5}).score
    """

    def __init__(
        self,
        base_ranges: Optional[Mapping[str, RangeBounds]] = None,
        range_config: Optional[RangeAdjustmentConfig] = None,
        rule_config: Optional[RuleConfig] = None
    ):
        """
        Initialize the BalanceEngine

        Args:
            base_ranges: Baseline ranges (validated); defaults to BASE_BALANCED_RANGES
            range_config: Range-shift rules; defaults to RANGE_ADJUSTMENTS
            rule_config: Penalty/synergy rules; defaults to RULES

        Raises:
            ConfigurationError: invalid configuration
        """
        self.base_ranges: RangeTable = load_base_ranges(
            BASE_BALANCED_RANGES if base_ranges is None else base_ranges
        )
        self.range_config: RangeAdjustmentConfig = (
            RANGE_ADJUSTMENTS if range_config is None else load_range_adjustments(range_config)
        )
        self.rule_config: RuleConfig = RULES if rule_config is None else load_rule_config(rule_config)

    def score(self, wine: WineInput) -> BalanceResult:
        """Balance score and adjusted ranges for a wine."""
        return calculate_wine_balance(wine, self.base_ranges, self.range_config, self.rule_config)

    def breakdown(self, wine: WineInput) -> Dict[str, CharacteristicCalculation]:
        """Per-characteristic diagnostic terms for a wine."""
        return calculate_characteristic_breakdown(
            wine, self.base_ranges, self.range_config, self.rule_config
        )

    def adjusted_ranges(self, wine: WineInput) -> RangeTable:
        """Ideal windows after range shifts for a wine."""
        return apply_dynamic_range_adjustments(as_vector(wine), self.base_ranges, self.range_config)

    def evaluate(self, wine: WineInput, dry_run: bool = False, detailed: bool = True) -> RuleEvaluation:
        """Rule evaluation for a wine (detailed diagnostics by default)."""
        return evaluate_rules(
            as_vector(wine), self.base_ranges, self.rule_config, dry_run=dry_run, detailed=detailed
        )

    def get_ui_data(self, wine: WineInput) -> Dict:
        """
        SINGLE SOURCE OF TRUTH for UI data

        Returns:
            Dict with:
            - balance: the score (rounded for display)
            - adjusted_ranges: {characteristic: [min, max]}
            - characteristics: per-characteristic breakdown, with the name of
              the strongest penalty and synergy acting on it
            - penalties / synergies: diagnostics of every firing rule
        """
        result, evaluation = _compute_balance(
            wine, self.base_ranges, self.range_config, self.rule_config, dry_run=True, detailed=True
        )
        drivers = strongest_rules(evaluation)
        precision = UIConstants.DISPLAY_PRECISION

        characteristics = {}
        for name, calc in result.breakdown.items():
            entry = {key: round(value, precision) if isinstance(value, float) else value
                     for key, value in asdict(calc).items()}
            entry['label'] = UIConstants.FEATURE_LABELS[name]
            entry['adjusted_range'] = [round(bound, precision) for bound in calc.adjusted_range]
            entry['penalty_rule'], entry['synergy_rule'] = drivers[name]
            characteristics[name] = entry

        return {
            "balance": round(result.score, precision),
            "adjusted_ranges": {
                name: [round(low, precision), round(high, precision)]
                for name, (low, high) in result.adjusted_ranges.items()
            },
            "characteristics": characteristics,
            "penalty_matrix": evaluation.penalty_matrix,
            "penalties": [asdict(d) for d in evaluation.detailed_breakdown.values()],
            "synergies": [asdict(d) for d in evaluation.synergy_breakdown.values()],
        }

    def to_json(self, wine: WineInput) -> str:
        """
        Get UI data as JSON string
        """
        return json.dumps(self.get_ui_data(wine), indent=2)
