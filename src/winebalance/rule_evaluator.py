"""
Penalty and synergy rule evaluation.

Both rule kinds go through the same scaling:

    avg_deviation = mean(|value - midpoint| / half_width) over rule sources
    raw_effect    = k * avg_deviation ** p
    capped_effect = min(cap, raw_effect)

Penalties turn the effect into a distance multiplier (1 + effect), synergies
into a distance reduction (effect). For every target the strongest firing
rule wins; effects from different rules never add up.
"""

import logging
import math
from typing import Dict, Mapping, Optional, Tuple

from winebalance.constants import CHARACTERISTICS, AlgorithmConstants, RuleKind
from winebalance.schema import (
    CharacteristicVector,
    RangeBounds,
    Rule,
    RuleConfig,
    RuleDiagnostic,
    RuleEvaluation,
)
from winebalance.utils import midpoint

logger = logging.getLogger(__name__)


def average_deviation(
    rule: Rule,
    characteristics: CharacteristicVector,
    base_ranges: Mapping[str, RangeBounds]
) -> float:
    """Mean absolute deviation of the rule's sources, in baseline half-widths."""
    total = 0.0
    for source in rule.sources:
        low, high = base_ranges[source]
        half_width = max(AlgorithmConstants.WIDTH_EPSILON, (high - low) / 2)
        total += abs((characteristics[source] - midpoint(low, high)) / half_width)
    return total / len(rule.sources) if rule.sources else 0.0


def calculate_rule_effect(
    rule: Rule,
    kind: RuleKind,
    characteristics: CharacteristicVector,
    base_ranges: Mapping[str, RangeBounds]
) -> RuleDiagnostic:
    """
    Scale one rule's effect. Does not check the rule's condition.

    Args:
        rule: Penalty or synergy rule
        kind: Which defaults apply to missing k/p/cap
        characteristics: Wine characteristic dict
        base_ranges: Baseline ranges the deviation is measured against

    Returns:
        RuleDiagnostic with every intermediate term
    """
    k, p, cap = rule.scaling(kind)
    avg_deviation = average_deviation(rule, characteristics, base_ranges)
    try:
        raw_effect = k * avg_deviation ** p
    except OverflowError:
        # Past the largest float; any positive k saturates at the cap
        raw_effect = math.inf if k > 0 else 0.0
    capped_effect = min(cap, raw_effect)

    return RuleDiagnostic(
        rule_name=rule.name,
        kind=kind.value,
        sources=list(rule.sources),
        targets=list(rule.targets),
        avg_deviation=avg_deviation,
        k=k,
        p=p,
        cap=cap,
        raw_effect=raw_effect,
        capped_effect=capped_effect,
        hits_cap=raw_effect >= cap,
        effect_percentage=capped_effect * 100,
    )


def evaluate_rules(
    characteristics: CharacteristicVector,
    base_ranges: Mapping[str, RangeBounds],
    config: RuleConfig,
    dry_run: bool = False,
    detailed: bool = False
) -> RuleEvaluation:
    """
    Evaluate every penalty and synergy rule against a wine.

    Args:
        characteristics: Wine characteristic dict
        base_ranges: Baseline ranges (deviation reference)
        config: Penalty and synergy rules
        dry_run: Also return {source_key: {target: multiplier}} so a caller
                 can see which rule group produced each penalty
        detailed: Also return a RuleDiagnostic per firing rule

    Returns:
        RuleEvaluation; penalty_scaling starts at 1 and synergy_reductions
        at 0 for every characteristic
    """
    penalty_scaling: Dict[str, float] = {name: 1.0 for name in CHARACTERISTICS}
    synergy_reductions: Dict[str, float] = {name: 0.0 for name in CHARACTERISTICS}
    penalty_matrix: Dict[str, Dict[str, float]] = {}
    penalty_details: Dict[str, RuleDiagnostic] = {}
    synergy_details: Dict[str, RuleDiagnostic] = {}

    for kind, rules in ((RuleKind.PENALTY, config.penalties), (RuleKind.SYNERGY, config.synergies)):
        for rule in rules:
            if not rule.condition(characteristics):
                continue

            effect = calculate_rule_effect(rule, kind, characteristics, base_ranges)
            logger.debug(
                f"{kind.value} '{rule.name}' fired: deviation={effect.avg_deviation:.3f} "
                f"effect={effect.capped_effect:.3f}{' (capped)' if effect.hits_cap else ''}"
            )

            if kind == RuleKind.PENALTY:
                multiplier = 1 + effect.capped_effect
                for target in rule.targets:
                    penalty_scaling[target] = max(penalty_scaling[target], multiplier)
                    if dry_run:
                        group = penalty_matrix.setdefault(rule.source_key, {})
                        group[target] = max(group.get(target, 1.0), multiplier)
                if detailed:
                    penalty_details[rule.name] = effect
            else:
                for target in rule.targets:
                    synergy_reductions[target] = max(synergy_reductions[target], effect.capped_effect)
                if detailed:
                    synergy_details[rule.name] = effect

    return RuleEvaluation(
        penalty_scaling=penalty_scaling,
        synergy_reductions=synergy_reductions,
        penalty_matrix=penalty_matrix if dry_run else None,
        detailed_breakdown=penalty_details if detailed else None,
        synergy_breakdown=synergy_details if detailed else None,
    )


def strongest_rules(evaluation: RuleEvaluation) -> Dict[str, Tuple[Optional[str], Optional[str]]]:
    """
    Name of the rule behind each characteristic's penalty and synergy.

    Needs an evaluation produced with detailed=True.

    Returns:
        {characteristic: (penalty rule name or None, synergy rule name or None)}
    """
    def _winner(details: Optional[Dict[str, RuleDiagnostic]], target: str) -> Optional[str]:
        best_name, best_effect = None, 0.0
        for name, diag in (details or {}).items():
            if target in diag.targets and diag.capped_effect > best_effect:
                best_name, best_effect = name, diag.capped_effect
        return best_name

    return {
        name: (_winner(evaluation.detailed_breakdown, name), _winner(evaluation.synergy_breakdown, name))
        for name in CHARACTERISTICS
    }
