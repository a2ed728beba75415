"""
Criticality settings

Tenant-wide point tables, class cutoffs, cost-class breakpoints and the
class x cost-class service level matrix. Stored settings are overlaid on the
built-in defaults so a partial document is always usable.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from material_policy.logger import get_logger

logger = get_logger("material_policy.buisness.policy.settings")

CLASS_ORDER = ('A', 'B', 'C', 'D')
COST_CLASSES = (1, 2, 3, 4)

MATRIX_START = 99.6  # A1
MATRIX_END = 65.0    # D4
MATRIX_STEPS = 6


def linear_service_level_matrix() -> Dict[str, float]:
    """A1 at 99.6% down to D4 at 65.0%, one step per row or column away from A1"""
    step = (MATRIX_START - MATRIX_END) / MATRIX_STEPS
    matrix = {}
    for row_index, row in enumerate(CLASS_ORDER):
        for col_index, cost_class in enumerate(COST_CLASSES):
            matrix[f"{row}{cost_class}"] = round(MATRIX_START - (row_index + col_index) * step, 1)
    return matrix


DEFAULT_POINTS = (1, 2, 3, 4, 5)


@dataclass(frozen=True)
class CriticalitySettings:
    risk_hse_points: Tuple[float, ...] = DEFAULT_POINTS
    impact_production_points: Tuple[float, ...] = DEFAULT_POINTS
    impact_quality_points: Tuple[float, ...] = DEFAULT_POINTS
    standby_points: Dict[str, float] = field(default_factory=lambda: {'yes': 1, 'no': 2})
    failure_frequency_points: Tuple[float, ...] = DEFAULT_POINTS
    repair_time_points: Tuple[float, ...] = DEFAULT_POINTS
    cutoffs: Dict[str, float] = field(default_factory=lambda: {'classA': 22, 'classB': 16, 'classC': 10})
    cost_ranges: Tuple[float, ...] = (100, 1000, 5000)
    service_level_matrix: Dict[str, float] = field(default_factory=linear_service_level_matrix)
    # Descriptive labels only; scoring indexes the points tables by ordinal
    failure_frequency_bands: Tuple[str, ...] = ()
    repair_time_bands: Tuple[str, ...] = ()

    # Stored document key -> attribute
    DOCUMENT_KEYS = {
        'riskHSEPoints': 'risk_hse_points',
        'impactProductionPoints': 'impact_production_points',
        'impactQualityPoints': 'impact_quality_points',
        'standbyPoints': 'standby_points',
        'failureFrequencyPoints': 'failure_frequency_points',
        'repairTimePoints': 'repair_time_points',
        'cutoffs': 'cutoffs',
        'costRanges': 'cost_ranges',
        'matrixServiceLevels': 'service_level_matrix',
        'failureFrequencyBands': 'failure_frequency_bands',
        'repairTimeBands': 'repair_time_bands',
    }

    @classmethod
    def from_document(cls, document: Optional[dict]) -> 'CriticalitySettings':
        """
        Overlay a stored settings document on the defaults.

        Keys that are missing or null fall back to the default; unknown keys are ignored.
        Partial nested objects (standbyPoints, cutoffs) are merged key by key.
        """
        defaults = cls()
        if not document:
            return defaults

        values = {}
        for key, attribute in cls.DOCUMENT_KEYS.items():
            value = document.get(key)
            if value is None:
                continue
            default_value = getattr(defaults, attribute)
            if attribute in ('standby_points', 'cutoffs'):
                merged = dict(default_value)
                merged.update(value)
                values[attribute] = merged
            elif isinstance(default_value, dict):
                values[attribute] = dict(value)
            else:
                values[attribute] = tuple(value)
        return cls(**values)


class CriticalitySettingsProvider:
    """Reads the tenant's criticality settings from the database"""

    SETTINGS_NAME = 'criticality'

    @classmethod
    def get(cls) -> CriticalitySettings:
        from material_policy.data.materials.criticality_settings import CriticalitySettingsRecord

        record = CriticalitySettingsRecord.query.filter_by(name=cls.SETTINGS_NAME).first()
        if record is None:
            logger.debug("No stored criticality settings; using defaults")
            return CriticalitySettings()
        return CriticalitySettings.from_document(record.settings)
