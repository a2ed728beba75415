"""
Pytest configuration and fixtures for the material policy engine
"""
import os
import tempfile

# Must be set before the app (and its logger) is imported
os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_material_policy')
os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'material_policy_test_logs'))

import pytest  # noqa: E402

from material_policy import create_app  # noqa: E402
from material_policy import db as _db  # noqa: E402
from material_policy.buisness.materials.approval_workflow import ApprovalWorkflow  # noqa: E402
from material_policy.data.materials.build import insert_critical_data  # noqa: E402

PROCUREMENT_DEFAULTS = {
    'standard_price': 250.0,
    'purchasing_processing_days': 2,
    'planned_delivery_days': 6,
    'gr_processing_days': 2,
}


def _make_app(database_uri):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': database_uri,
        'MATERIAL_TXN_MAX_ATTEMPTS': 5,
    })
    return app


@pytest.fixture(scope='function')
def app():
    """Flask application on an in-memory database seeded with critical data"""
    app = _make_app('sqlite://')
    with app.app_context():
        _db.create_all()
        insert_critical_data()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def file_app(tmp_path):
    """Flask application on a SQLite file so a second connection can write concurrently"""
    app = _make_app(f"sqlite:///{tmp_path / 'material_policy_race.db'}")
    with app.app_context():
        _db.create_all()
        insert_critical_data()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture
def submit_new():
    """Submit a NewMaterial request; keyword arguments override the payload"""
    def _submit(name='Mechanical seal 45mm', material_type_code='PMP', warehouse_id='WH-01', **overrides):
        payload = {
            'request_type': 'NewMaterial',
            'name': name,
            'material_type_code': material_type_code,
            'department_id': 'DEP-MAINT',
            'department_name': 'Maintenance',
            'warehouse_id': warehouse_id,
            'warehouse_name': f'Section {warehouse_id}' if warehouse_id else None,
            'procurement_defaults': dict(PROCUREMENT_DEFAULTS),
        }
        payload.update(overrides)
        return ApprovalWorkflow.submit(payload, actor='requester')
    return _submit


@pytest.fixture
def approve_all():
    """Grant levels 1, 2 and 3 in order and return the final ApprovalResult"""
    def _approve(record_id):
        result = None
        for level in (1, 2, 3):
            result = ApprovalWorkflow.approve(record_id, level, approver=f'approver{level}')
        return result
    return _approve


@pytest.fixture
def approved_material(submit_new, approve_all):
    """An approved NewMaterial stocked at WH-01 with a 10-day lead time and 3650 units annual usage"""
    record = submit_new(inventory_defaults={'annual_usage_quantity': 3650, 'bin': 'A-01'})
    approve_all(record.id)
    return _db.session.get(type(record), record.id)
