"""Wine Balance - deterministic balance scoring for wine characteristics."""

from winebalance.balance import (
    BalanceEngine,
    calculate_characteristic_breakdown,
    calculate_wine_balance,
)
from winebalance.config import BASE_BALANCED_RANGES, RANGE_ADJUSTMENTS, default_characteristics
from winebalance.range_adjuster import apply_dynamic_range_adjustments
from winebalance.rule_evaluator import evaluate_rules
from winebalance.rules import RULES
from winebalance.schema import (
    BalanceResult,
    RangeShiftRule,
    Rule,
    RuleConfig,
    WineCharacteristics,
)

__version__ = "0.1.0"

__all__ = [
    'BalanceEngine',
    'BalanceResult',
    'WineCharacteristics',
    'RangeShiftRule',
    'Rule',
    'RuleConfig',
    'BASE_BALANCED_RANGES',
    'RANGE_ADJUSTMENTS',
    'RULES',
    'apply_dynamic_range_adjustments',
    'evaluate_rules',
    'calculate_wine_balance',
    'calculate_characteristic_breakdown',
    'default_characteristics',
    '__version__',
]
