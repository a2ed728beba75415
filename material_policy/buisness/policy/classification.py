"""
ClassificationEngine

Pure scoring of the six criticality factors against CriticalitySettings.
No I/O: callers supply the settings and the unit price.
"""

from dataclasses import dataclass
from typing import Any, Dict

from material_policy.buisness.materials.errors import ValidationError
from material_policy.buisness.policy.settings import CriticalitySettings

DEFAULT_SERVICE_LEVEL = 95.0
ORDINAL_RANGE = range(1, 6)
STANDBY_VALUES = ('Yes', 'No')


@dataclass(frozen=True)
class CriticalityInputs:
    risk_hse: int
    production_impact: int
    quality_impact: int
    standby_available: str
    failure_frequency: int
    repair_time: int

    ORDINAL_FIELDS = ('risk_hse', 'production_impact', 'quality_impact', 'failure_frequency', 'repair_time')

    # Request/body key -> attribute; stock record columns use the criticality_ prefix
    COLUMN_MAP = {
        'risk_hse': 'criticality_risk_hse',
        'production_impact': 'criticality_production_impact',
        'quality_impact': 'criticality_impact_quality',
        'standby_available': 'criticality_standby_available',
        'failure_frequency': 'criticality_failure_frequency',
        'repair_time': 'criticality_repair_time',
    }

    def __post_init__(self):
        for name in self.ORDINAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value not in ORDINAL_RANGE:
                raise ValidationError(f"{name} must be an integer from 1 to 5, got {value!r}")
        if self.standby_available not in STANDBY_VALUES:
            raise ValidationError(f"standby_available must be 'Yes' or 'No', got {self.standby_available!r}")

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'CriticalityInputs':
        """Build from a request body; ordinals given as numeric strings are accepted"""
        if not isinstance(data, dict):
            raise ValidationError("Criticality inputs must be an object")
        values = {}
        for name in cls.COLUMN_MAP:
            if data.get(name) is None:
                raise ValidationError(f"{name} is required")
            value = data[name]
            if name in cls.ORDINAL_FIELDS and isinstance(value, str) and value.strip().isdigit():
                value = int(value.strip())
            values[name] = value
        return cls(**values)

    @classmethod
    def from_stock_record(cls, stock) -> 'CriticalityInputs':
        """
        Raises:
            ValidationError: If any factor has not been captured on the stock record
        """
        return cls.from_mapping({name: getattr(stock, column) for name, column in cls.COLUMN_MAP.items()})

    def as_columns(self) -> Dict[str, Any]:
        return {column: getattr(self, name) for name, column in self.COLUMN_MAP.items()}


@dataclass(frozen=True)
class ClassificationResult:
    score: float
    criticality_class: str
    cost_class: int
    service_level_target: float

    @property
    def matrix_key(self):
        return f"{self.criticality_class}{self.cost_class}"

    def to_dict(self):
        return {
            'score': self.score,
            'criticality_class': self.criticality_class,
            'cost_class': self.cost_class,
            'service_level_target': self.service_level_target,
        }


def _points(table, ordinal):
    """Point value for a 1-based ordinal; a short table contributes 0"""
    try:
        return table[ordinal - 1]
    except IndexError:
        return 0


class ClassificationEngine:
    """Deterministic: identical inputs and settings always give identical results"""

    @staticmethod
    def score(inputs: CriticalityInputs, settings: CriticalitySettings) -> float:
        standby = settings.standby_points.get('no' if inputs.standby_available == 'No' else 'yes', 0)
        return (
            _points(settings.risk_hse_points, inputs.risk_hse)
            + _points(settings.impact_production_points, inputs.production_impact)
            + _points(settings.impact_quality_points, inputs.quality_impact)
            + standby
            + _points(settings.failure_frequency_points, inputs.failure_frequency)
            + _points(settings.repair_time_points, inputs.repair_time)
        )

    @staticmethod
    def criticality_class(score: float, settings: CriticalitySettings) -> str:
        cutoffs = settings.cutoffs
        if 'classA' in cutoffs and score >= cutoffs['classA']:
            return 'A'
        if 'classB' in cutoffs and score >= cutoffs['classB']:
            return 'B'
        if 'classC' in cutoffs and score >= cutoffs['classC']:
            return 'C'
        return 'D'

    @staticmethod
    def cost_class(unit_price: float, settings: CriticalitySettings) -> int:
        """1 below the first breakpoint, 4 at or above the third"""
        price = unit_price or 0
        ranges = settings.cost_ranges
        for index in (2, 1, 0):
            if index < len(ranges) and price >= ranges[index]:
                return index + 2
        return 1

    @staticmethod
    def service_level_target(criticality_class: str, cost_class: int, settings: CriticalitySettings) -> float:
        value = (settings.service_level_matrix or {}).get(f"{criticality_class}{cost_class}")
        if value is None:
            return DEFAULT_SERVICE_LEVEL
        try:
            return float(value)
        except (TypeError, ValueError):
            return DEFAULT_SERVICE_LEVEL

    @classmethod
    def classify(cls, inputs: CriticalityInputs, unit_price: float, settings: CriticalitySettings) -> ClassificationResult:
        score = cls.score(inputs, settings)
        criticality_class = cls.criticality_class(score, settings)
        cost_class = cls.cost_class(unit_price, settings)
        return ClassificationResult(
            score=score,
            criticality_class=criticality_class,
            cost_class=cost_class,
            service_level_target=cls.service_level_target(criticality_class, cost_class, settings),
        )
