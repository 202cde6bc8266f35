"""
Tests for penalty and synergy rule evaluation.

Covers the shared scaling formula, caps, defaults, "strongest wins"
combination and the diagnostic modes.
"""

import pytest
from winebalance.balance import calculate_wine_balance
from winebalance.constants import CHARACTERISTICS, RuleKind
from winebalance.rule_evaluator import (
    average_deviation,
    calculate_rule_effect,
    evaluate_rules,
    strongest_rules,
)
from winebalance.rules import RULES
from winebalance.schema import Rule, RuleConfig


@pytest.fixture
def flat_ranges():
    """Every characteristic on [0.4, 0.6]."""
    return {name: (0.4, 0.6) for name in CHARACTERISTICS}


@pytest.fixture
def clashing_wine():
    """High acidity and sweetness, everything else centred."""
    return {
        'acidity': 0.9, 'aroma': 0.5, 'body': 0.5,
        'spice': 0.5, 'sweetness': 0.9, 'tannins': 0.5
    }


def always(wine):
    return True


def never(wine):
    return False


class TestAverageDeviation:
    """Test source deviation in half-widths."""

    def test_single_source(self, flat_ranges):
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7

        assert average_deviation(rule, wine, flat_ranges) == pytest.approx(2.0)

    def test_multiple_sources_are_averaged(self, flat_ranges):
        rule = Rule(name="r", sources=['acidity', 'body'], targets=['body'], condition=always)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7   # deviation 2
        wine['body'] = 0.4      # deviation 1 (absolute)

        assert average_deviation(rule, wine, flat_ranges) == pytest.approx(1.5)


class TestCalculateRuleEffect:
    """Test the shared k * deviation ** p formula."""

    def test_formula(self, flat_ranges):
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always, k=0.3, p=1.5, cap=5.0)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7

        effect = calculate_rule_effect(rule, RuleKind.PENALTY, wine, flat_ranges)

        assert effect.raw_effect == pytest.approx(0.3 * 2.0 ** 1.5)
        assert effect.capped_effect == pytest.approx(effect.raw_effect)
        assert effect.hits_cap is False
        assert effect.effect_percentage == pytest.approx(effect.capped_effect * 100)

    def test_cap_respected_at_maximal_deviation(self, flat_ranges):
        """At the baseline bound (deviation 1.0) a huge k is still capped."""
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always, k=50.0, p=1.0, cap=0.5)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.6

        effect = calculate_rule_effect(rule, RuleKind.PENALTY, wine, flat_ranges)

        assert effect.avg_deviation == pytest.approx(1.0)
        assert effect.capped_effect == 0.5
        assert effect.hits_cap is True

    def test_defaults_filled_in(self, flat_ranges):
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)

        penalty = calculate_rule_effect(rule, RuleKind.PENALTY, wine, flat_ranges)
        synergy = calculate_rule_effect(rule, RuleKind.SYNERGY, wine, flat_ranges)

        assert (penalty.k, penalty.p, penalty.cap) == (0.2, 1.2, 2.0)
        assert (synergy.k, synergy.p, synergy.cap) == (0.2, 1.2, 0.75)

    def test_default_caps_applied(self):
        """Extreme deviation hits 2.0 for penalties and 0.75 for synergies."""
        ranges = {name: (0.45, 0.55) for name in CHARACTERISTICS}
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 1.0   # deviation 10, raw effect ~3.17

        assert calculate_rule_effect(rule, RuleKind.PENALTY, wine, ranges).capped_effect == 2.0
        assert calculate_rule_effect(rule, RuleKind.SYNERGY, wine, ranges).capped_effect == 0.75

    def test_overflowing_power_saturates_at_cap(self):
        """A zero-width baseline with a steep exponent overflows the power."""
        ranges = {name: (0.5, 0.5) for name in CHARACTERISTICS}
        rule = Rule(name="r", sources=['acidity'], targets=['body'], condition=always, p=120.0)
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 1.0   # deviation 5000

        effect = calculate_rule_effect(rule, RuleKind.PENALTY, wine, ranges)

        assert effect.capped_effect == 2.0
        assert effect.hits_cap is True

    def test_extreme_value_scores_without_error(self, flat_ranges):
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 1e300
        wine['sweetness'] = 0.9

        result = calculate_wine_balance(wine, flat_ranges, None, RULES)

        assert result.score == 0.0


class TestEvaluateRules:
    """Test combination across rules."""

    def test_no_rules_neutral(self, flat_ranges, clashing_wine):
        result = evaluate_rules(clashing_wine, flat_ranges, RuleConfig())

        assert result.penalty_scaling == {name: 1.0 for name in CHARACTERISTICS}
        assert result.synergy_reductions == {name: 0.0 for name in CHARACTERISTICS}
        assert result.penalty_matrix is None
        assert result.detailed_breakdown is None

    def test_false_condition_skips_rule(self, flat_ranges, clashing_wine):
        config = RuleConfig(penalties=[
            Rule(name="r", sources=['acidity'], targets=['sweetness'], condition=never, k=1.0)
        ])
        result = evaluate_rules(clashing_wine, flat_ranges, config)
        assert result.penalty_scaling['sweetness'] == 1.0

    def test_condition_sees_full_vector(self, flat_ranges, clashing_wine):
        seen = []
        config = RuleConfig(penalties=[
            Rule(name="r", sources=['acidity'], targets=['sweetness'],
                 condition=lambda wine: seen.append(dict(wine)) or False)
        ])
        evaluate_rules(clashing_wine, flat_ranges, config)
        assert seen == [clashing_wine]

    def test_clashing_sweetness_penalty(self, flat_ranges, clashing_wine):
        """acidity 0.9 is 4 half-widths out: 0.4 * 4 ** 1.5 = 3.2, capped at 2.0."""
        result = evaluate_rules(clashing_wine, flat_ranges, RULES)

        assert result.penalty_scaling['sweetness'] > 1
        assert result.penalty_scaling['sweetness'] == pytest.approx(3.0)
        assert result.penalty_scaling['acidity'] == 1.0

    def test_penalties_combine_by_max_not_sum(self, flat_ranges):
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7
        config = RuleConfig(penalties=[
            Rule(name="weak", sources=['acidity'], targets=['body'], condition=always, k=0.1, p=1.0),
            Rule(name="strong", sources=['acidity'], targets=['body'], condition=always, k=0.3, p=1.0),
        ])

        result = evaluate_rules(wine, flat_ranges, config)

        assert result.penalty_scaling['body'] == pytest.approx(1 + 0.6)
        assert result.penalty_scaling['body'] != pytest.approx(1 + 0.2 + 0.6)

    def test_synergies_combine_by_max(self, flat_ranges):
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7
        config = RuleConfig(synergies=[
            Rule(name="a", sources=['acidity'], targets=['body', 'spice'], condition=always, k=0.1, p=1.0),
            Rule(name="b", sources=['acidity'], targets=['body'], condition=always, k=0.25, p=1.0),
        ])

        result = evaluate_rules(wine, flat_ranges, config)

        assert result.synergy_reductions['body'] == pytest.approx(0.5)
        assert result.synergy_reductions['spice'] == pytest.approx(0.2)
        assert result.penalty_scaling['body'] == 1.0

    def test_dry_run_groups_by_source(self, flat_ranges):
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7
        config = RuleConfig(penalties=[
            Rule(name="a", sources=['acidity'], targets=['body'], condition=always, k=0.1, p=1.0),
            Rule(name="b", sources=['acidity', 'spice'], targets=['tannins'], condition=always, k=0.1, p=1.0),
        ])

        result = evaluate_rules(wine, flat_ranges, config, dry_run=True)

        assert set(result.penalty_matrix) == {'acidity', 'acidity+spice'}
        assert result.penalty_matrix['acidity']['body'] == pytest.approx(1.2)
        assert result.penalty_matrix['acidity+spice']['tannins'] == pytest.approx(1.1)
        # Collapsed view is still produced
        assert result.penalty_scaling['body'] == pytest.approx(1.2)

    def test_detailed_breakdown_per_rule(self, flat_ranges, clashing_wine):
        result = evaluate_rules(clashing_wine, flat_ranges, RULES, detailed=True)

        diag = result.detailed_breakdown["Clashing Sweetness"]
        assert diag.sources == ['acidity']
        assert diag.targets == ['sweetness']
        assert diag.avg_deviation == pytest.approx(4.0)
        assert diag.raw_effect == pytest.approx(3.2)
        assert diag.capped_effect == 2.0
        assert diag.hits_cap is True
        assert diag.effect_percentage == pytest.approx(200.0)
        assert result.synergy_breakdown == {}

    def test_detailed_mode_does_not_change_numbers(self, flat_ranges, clashing_wine):
        plain = evaluate_rules(clashing_wine, flat_ranges, RULES)
        detailed = evaluate_rules(clashing_wine, flat_ranges, RULES, dry_run=True, detailed=True)

        assert plain.penalty_scaling == detailed.penalty_scaling
        assert plain.synergy_reductions == detailed.synergy_reductions


class TestStrongestRules:
    """Test attribution of each characteristic's effect to a rule."""

    def test_strongest_penalty_named(self, flat_ranges):
        wine = dict.fromkeys(CHARACTERISTICS, 0.5)
        wine['acidity'] = 0.7
        config = RuleConfig(
            penalties=[
                Rule(name="weak", sources=['acidity'], targets=['body'], condition=always, k=0.1, p=1.0),
                Rule(name="strong", sources=['acidity'], targets=['body'], condition=always, k=0.3, p=1.0),
            ],
            synergies=[
                Rule(name="helper", sources=['acidity'], targets=['spice'], condition=always, k=0.1, p=1.0),
            ],
        )

        drivers = strongest_rules(evaluate_rules(wine, flat_ranges, config, detailed=True))

        assert drivers['body'] == ("strong", None)
        assert drivers['spice'] == (None, "helper")
        assert drivers['acidity'] == (None, None)
