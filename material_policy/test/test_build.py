"""
Tests for table creation and critical data seeding
"""
from material_policy import db
from material_policy.buisness.policy.settings import CriticalitySettings, CriticalitySettingsProvider
from material_policy.data.core.sequences import MaterialTypeCounter
from material_policy.data.materials.build import insert_critical_data, load_critical_data, register_material_type
from material_policy.data.materials.criticality_settings import CriticalitySettingsRecord
from material_policy.data.materials.material_type import MaterialType


def test_seeding_is_idempotent(app):
    insert_critical_data()
    insert_critical_data()

    seeded = load_critical_data()['Core']['Material_Types']
    assert MaterialType.query.count() == len(seeded)
    assert CriticalitySettingsRecord.query.count() == 1
    for type_data in seeded.values():
        assert MaterialTypeCounter.get_current_value(type_data['code']) == 0


def test_registering_a_type_creates_its_counter(app):
    material_type, created = register_material_type({'code': 'HYD', 'name': 'Hydraulic'}, actor='admin')
    db.session.commit()

    assert created is True
    assert material_type.created_by == 'admin'
    assert MaterialTypeCounter.get_current_value('HYD') == 0

    again, created = register_material_type({'code': 'HYD', 'name': 'Hydraulic'})
    assert created is False
    assert again.id == material_type.id


def test_provider_reads_stored_settings(app):
    assert CriticalitySettingsProvider.get().cutoffs == {'classA': 22, 'classB': 16, 'classC': 10}

    record = CriticalitySettingsRecord.query.filter_by(name='criticality').one()
    record.settings = {'cutoffs': {'classA': 25}, 'costRanges': [50, 500, 2500]}
    db.session.commit()

    settings = CriticalitySettingsProvider.get()
    assert settings.cutoffs['classA'] == 25
    assert settings.cutoffs['classB'] == 16
    assert settings.cost_ranges == (50, 500, 2500)


def test_provider_defaults_without_stored_settings(app):
    CriticalitySettingsRecord.query.delete()
    db.session.commit()

    assert CriticalitySettingsProvider.get() == CriticalitySettings()
