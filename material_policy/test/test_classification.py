"""
Tests for criticality scoring, cost classes and service level lookup
"""
import pytest

from material_policy.buisness.materials.errors import ValidationError
from material_policy.buisness.policy.classification import (
    DEFAULT_SERVICE_LEVEL,
    ClassificationEngine,
    CriticalityInputs,
)
from material_policy.buisness.policy.settings import CriticalitySettings, linear_service_level_matrix


def inputs(risk=5, production=5, quality=5, standby='No', failure=5, repair=5):
    return CriticalityInputs(
        risk_hse=risk,
        production_impact=production,
        quality_impact=quality,
        standby_available=standby,
        failure_frequency=failure,
        repair_time=repair,
    )


def test_worst_case_scores_27_and_is_class_a():
    result = ClassificationEngine.classify(inputs(), 50, CriticalitySettings())

    assert result.score == 27
    assert result.criticality_class == 'A'
    assert result.cost_class == 1
    assert result.service_level_target == 99.6


def test_best_case_scores_6_and_is_class_d():
    result = ClassificationEngine.classify(inputs(1, 1, 1, 'Yes', 1, 1), 50, CriticalitySettings())

    assert result.score == 6
    assert result.criticality_class == 'D'


@pytest.mark.parametrize('score, expected', [(22, 'A'), (21, 'B'), (16, 'B'), (15, 'C'), (10, 'C'), (9, 'D')])
def test_class_cutoffs_are_inclusive(score, expected):
    assert ClassificationEngine.criticality_class(score, CriticalitySettings()) == expected


@pytest.mark.parametrize('price, expected', [
    (0, 1), (99.99, 1), (100, 2), (999, 2), (1000, 3), (4999.99, 3), (5000, 4), (250000, 4),
])
def test_cost_class_breakpoints(price, expected):
    assert ClassificationEngine.cost_class(price, CriticalitySettings()) == expected


def test_linear_matrix_corners_and_steps():
    matrix = linear_service_level_matrix()

    assert len(matrix) == 16
    assert matrix['A1'] == 99.6
    assert matrix['D4'] == 65.0
    assert matrix['A2'] == 93.8
    assert matrix['B1'] == matrix['A2']
    assert matrix['B2'] == 88.1


def test_empty_matrix_degrades_to_default_target():
    settings = CriticalitySettings(service_level_matrix={})

    result = ClassificationEngine.classify(inputs(), 7000, settings)

    assert result.criticality_class == 'A'
    assert result.cost_class == 4
    assert result.service_level_target == DEFAULT_SERVICE_LEVEL


def test_malformed_matrix_cell_degrades_to_default_target():
    settings = CriticalitySettings(service_level_matrix={'A1': 'n/a'})

    assert ClassificationEngine.service_level_target('A', 1, settings) == DEFAULT_SERVICE_LEVEL


def test_classification_is_deterministic():
    settings = CriticalitySettings()
    first = ClassificationEngine.classify(inputs(3, 4, 2, 'Yes', 3, 2), 1500, settings)

    for _ in range(5):
        assert ClassificationEngine.classify(inputs(3, 4, 2, 'Yes', 3, 2), 1500, settings) == first


def test_custom_point_tables_are_indexed_by_ordinal():
    settings = CriticalitySettings(
        risk_hse_points=(0, 0, 0, 0, 10),
        standby_points={'yes': 0, 'no': 7},
    )

    assert ClassificationEngine.score(inputs(5, 1, 1, 'No', 1, 1), settings) == 10 + 1 + 1 + 7 + 1 + 1


@pytest.mark.parametrize('overrides', [
    {'risk': 0},
    {'production': 6},
    {'quality': True},
    {'failure': 2.5},
    {'repair': None},
    {'standby': 'Maybe'},
    {'standby': 'no'},
])
def test_out_of_range_inputs_are_rejected(overrides):
    with pytest.raises(ValidationError):
        inputs(**overrides)


def test_inputs_from_mapping_accept_numeric_strings():
    parsed = CriticalityInputs.from_mapping({
        'risk_hse': '4',
        'production_impact': 3,
        'quality_impact': '2',
        'standby_available': 'Yes',
        'failure_frequency': 1,
        'repair_time': 5,
    })

    assert parsed.risk_hse == 4
    assert parsed.quality_impact == 2


def test_inputs_from_mapping_require_every_factor():
    with pytest.raises(ValidationError, match='repair_time'):
        CriticalityInputs.from_mapping({
            'risk_hse': 4,
            'production_impact': 3,
            'quality_impact': 2,
            'standby_available': 'Yes',
            'failure_frequency': 1,
        })


def test_settings_overlay_keeps_defaults_for_missing_keys():
    settings = CriticalitySettings.from_document({
        'cutoffs': {'classA': 25},
        'costRanges': [50, 500, 2500],
        'failureFrequencyBands': ['rare', 'often'],
    })

    assert settings.cutoffs == {'classA': 25, 'classB': 16, 'classC': 10}
    assert settings.cost_ranges == (50, 500, 2500)
    assert settings.risk_hse_points == (1, 2, 3, 4, 5)
    assert settings.service_level_matrix == linear_service_level_matrix()
    assert settings.failure_frequency_bands == ('rare', 'often')


def test_settings_bands_do_not_affect_scoring():
    plain = CriticalitySettings()
    banded = CriticalitySettings.from_document({'repairTimeBands': ['a', 'b', 'c', 'd', 'e']})

    assert ClassificationEngine.score(inputs(), plain) == ClassificationEngine.score(inputs(), banded)
