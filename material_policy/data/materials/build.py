#!/usr/bin/env python3
"""
Material lifecycle build module
Registers the material models and seeds the critical data the engine cannot run without
"""

import json
from pathlib import Path

from material_policy import db
from material_policy.logger import get_logger

logger = get_logger("material_policy.data.build")

CRITICAL_DATA_FILE = Path(__file__).parent / 'build_data_critical.json'


def build_models():
    """
    Register material models with SQLAlchemy

    Returns:
        bool: True if successful
    """
    # Models are registered when imported; this function ensures they're loaded
    from material_policy.data.materials.material_type import MaterialType
    from material_policy.data.materials.material_master import MaterialMasterRecord
    from material_policy.data.materials.warehouse_stock import WarehouseStockRecord
    from material_policy.data.materials.material_movement import MaterialMovement
    from material_policy.data.materials.vendor_agreement import VendorAgreement
    from material_policy.data.materials.criticality_settings import CriticalitySettingsRecord
    from material_policy.data.materials.audit_log import AuditLogEntry
    from material_policy.data.core.sequences import MaterialTypeCounter

    models = [
        MaterialType,
        MaterialMasterRecord,
        WarehouseStockRecord,
        MaterialMovement,
        VendorAgreement,
        CriticalitySettingsRecord,
        AuditLogEntry,
        MaterialTypeCounter,
    ]
    logger.debug(f"Registered {len(models)} material models")
    return True


def create_tables():
    """Create database tables for all registered models"""
    db.create_all()
    logger.info("Material tables created")


def register_material_type(type_data, actor='system'):
    """
    Register a material type and make sure its code counter exists

    Does not commit.

    Returns:
        tuple: (MaterialType, created)
    """
    from material_policy.data.materials.material_type import MaterialType
    from material_policy.data.core.sequences import MaterialTypeCounter

    material_type, created = MaterialType.find_or_create_from_dict(
        type_data,
        lookup_fields=['code'],
        actor=actor,
        commit=False,
    )
    MaterialTypeCounter.create_if_not_exists(material_type.code)
    return material_type, created


def load_critical_data(path=None):
    critical_file = Path(path) if path else CRITICAL_DATA_FILE
    if not critical_file.exists():
        error_msg = f"Critical data file not found: {critical_file}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)
    with open(critical_file, 'r') as f:
        return json.load(f)


def insert_critical_data(path=None):
    """
    Insert critical data that must always be present

    Loads build_data_critical.json and inserts criticality settings and
    material types (with their counters). Existing rows are left untouched.
    """
    from material_policy.data.materials.criticality_settings import CriticalitySettingsRecord

    critical_data = load_critical_data(path)

    try:
        settings_data = critical_data.get('Essential', {}).get('Criticality_Settings')
        if settings_data:
            existing = CriticalitySettingsRecord.query.filter_by(name=settings_data['name']).first()
            if existing is None:
                db.session.add(CriticalitySettingsRecord(
                    name=settings_data['name'],
                    settings=settings_data['settings'],
                    created_by='system',
                    updated_by='system',
                ))
                logger.info("Inserted default criticality settings")

        for type_key, type_data in critical_data.get('Core', {}).get('Material_Types', {}).items():
            _, created = register_material_type(type_data)
            if created:
                logger.info(f"Inserted material type: {type_data.get('code')}")

        db.session.commit()
        logger.info("Critical data verified")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Critical data insertion failed: {e}")
        raise


def build_database(app=None, seed_defaults=True):
    """
    Create tables and seed critical data

    Args:
        app: Flask application (created with create_app() when omitted)
        seed_defaults (bool): Insert settings and material types from build_data_critical.json
    """
    if app is None:
        from material_policy import create_app
        app = create_app()

    with app.app_context():
        logger.info("Starting database build")
        build_models()
        create_tables()
        if seed_defaults:
            insert_critical_data()
        logger.info("Database build completed successfully")
