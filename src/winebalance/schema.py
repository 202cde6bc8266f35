"""Pydantic schemas and result types for the balance engine."""

import logging
from dataclasses import dataclass, field, asdict
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from winebalance.constants import (
    CHARACTERISTICS,
    AlgorithmConstants,
    Characteristic,
    RuleKind,
)

logger = logging.getLogger(__name__)

# (min, max) window on the 0-1 scale
RangeBounds = Tuple[float, float]
RangeTable = Dict[str, RangeBounds]
CharacteristicVector = Dict[str, float]


# =======================
# INPUT MODELS
# =======================

class WineCharacteristics(BaseModel):
    """Validated characteristic vector of a wine batch (0-1 scale)."""

    acidity: float = Field(..., ge=0.0, le=1.0, description="Perceived acidity")
    aroma: float = Field(..., ge=0.0, le=1.0, description="Aromatic intensity")
    body: float = Field(..., ge=0.0, le=1.0, description="Body weight")
    spice: float = Field(..., ge=0.0, le=1.0, description="Spice character")
    sweetness: float = Field(..., ge=0.0, le=1.0, description="Residual sweetness")
    tannins: float = Field(..., ge=0.0, le=1.0, description="Tannin level")

    def to_dict(self) -> CharacteristicVector:
        """Plain dict in canonical order."""
        return {name: getattr(self, name) for name in CHARACTERISTICS}


class BalancedRange(BaseModel):
    """A baseline window for one characteristic."""

    model_config = ConfigDict(frozen=True)

    low: float = Field(..., ge=0.0, le=1.0)
    high: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode='after')
    def _check_order(self) -> 'BalancedRange':
        if self.low > self.high:
            raise ValueError(f"range min {self.low} is above max {self.high}")
        return self

    def as_tuple(self) -> RangeBounds:
        return (self.low, self.high)


# =======================
# RULE MODELS
# =======================

class RangeShiftRule(BaseModel):
    """Shifts a target window when its source leaves the baseline midpoint."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    target: Characteristic
    shift_per_unit: float = Field(..., description="Shift per unit of source deviation, scaled by target width")
    clamp: Optional[Tuple[float, float]] = Field(None, description="Bounds the shifted window must stay within")
    name: str = ""
    description: str = ""
    requirement: str = ""


# {source: {"above"|"below": [RangeShiftRule, ...]}}
RangeAdjustmentConfig = Dict[str, Dict[str, List[RangeShiftRule]]]


class Rule(BaseModel):
    """
    Penalty or synergy rule.

    Penalties and synergies share the same scaling math:
        effect = min(cap, k * avg_deviation ** p)
    The condition receives the full characteristic dict.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    sources: List[Characteristic] = Field(..., min_length=1, description="Characteristics whose deviation drives the effect")
    targets: List[Characteristic] = Field(..., min_length=1, description="Characteristics receiving the effect")
    condition: Callable[[CharacteristicVector], bool]
    k: Optional[float] = Field(None, ge=0.0, description="Scaling factor")
    p: Optional[float] = Field(None, gt=0.0, description="Power factor")
    cap: Optional[float] = Field(None, ge=0.0, description="Maximum effect")
    description: str = ""
    requirement: str = ""

    @property
    def source_key(self) -> str:
        """Source group key, e.g. 'body+spice'."""
        return '+'.join(self.sources)

    def scaling(self, kind: RuleKind) -> Tuple[float, float, float]:
        """(k, p, cap) with defaults filled in for the rule kind."""
        k = AlgorithmConstants.DEFAULT_K if self.k is None else self.k
        p = AlgorithmConstants.DEFAULT_P if self.p is None else self.p
        cap = AlgorithmConstants.default_cap(kind) if self.cap is None else self.cap
        return k, p, cap


class RuleConfig(BaseModel):
    """Penalty and synergy rule lists."""

    model_config = ConfigDict(frozen=True)

    penalties: List[Rule] = Field(default_factory=list)
    synergies: List[Rule] = Field(default_factory=list)

    def without(self, *names: str) -> 'RuleConfig':
        """Copy of this config with the named rules removed."""
        return RuleConfig(
            penalties=[r for r in self.penalties if r.name not in names],
            synergies=[r for r in self.synergies if r.name not in names],
        )

    def rule_names(self) -> List[str]:
        return [r.name for r in self.penalties] + [r.name for r in self.synergies]


# =======================
# RESULT TYPES
# =======================

@dataclass
class RuleDiagnostic:
    """Display record for one firing rule."""
    rule_name: str
    kind: str
    sources: List[str]
    targets: List[str]
    avg_deviation: float
    k: float
    p: float
    cap: float
    raw_effect: float
    capped_effect: float
    hits_cap: bool
    effect_percentage: float


@dataclass
class RuleEvaluation:
    """Per-characteristic penalty multipliers and synergy reductions."""
    penalty_scaling: Dict[str, float]
    synergy_reductions: Dict[str, float]
    # Dry run only: {source_key: {target: multiplier}}
    penalty_matrix: Optional[Dict[str, Dict[str, float]]] = None
    # Detailed mode only: {rule_name: RuleDiagnostic}
    detailed_breakdown: Optional[Dict[str, RuleDiagnostic]] = None
    synergy_breakdown: Optional[Dict[str, RuleDiagnostic]] = None


@dataclass
class CharacteristicCalculation:
    """Every intermediate term of one characteristic's distance."""
    value: float
    adjusted_range: RangeBounds
    distance_inside: float
    distance_outside: float
    penalty: float
    base_total_distance: float
    total_scaling_multiplier: float
    synergy_reduction: float
    final_total_distance: float


@dataclass
class BalanceResult:
    """Balance score plus the adjusted ranges it was computed against."""
    score: float
    adjusted_ranges: RangeTable
    breakdown: Optional[Dict[str, CharacteristicCalculation]] = field(default=None, repr=False)

    def to_dict(self) -> Dict:
        return asdict(self)


# =======================
# COERCION HELPERS
# =======================

WineInput = Union[WineCharacteristics, Mapping[str, float]]


def as_vector(wine: WineInput) -> CharacteristicVector:
    """
    Coerce a wine into a plain characteristic dict in canonical order.

    Accepts a WineCharacteristics model, a dict, or anything with .get()
    (such as a pandas Series). Missing characteristics default to 0.
    """
    if isinstance(wine, WineCharacteristics):
        return wine.to_dict()

    vector = {}
    for name in CHARACTERISTICS:
        value = wine.get(name)
        if value is None:
            logger.warning(f"Characteristic '{name}' missing, defaulting to 0")
            value = 0.0
        vector[name] = float(value)
    return vector


def copy_ranges(ranges: Mapping[str, RangeBounds]) -> RangeTable:
    """Fresh copy of a range table in canonical order."""
    return {name: (float(ranges[name][0]), float(ranges[name][1])) for name in CHARACTERISTICS}
