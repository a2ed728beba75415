"""
Tests for the /materials JSON endpoints
"""
from sqlalchemy import text

from material_policy import db
from material_policy.buisness.materials.approval_workflow import ApprovalWorkflow
from material_policy.buisness.materials.errors import TransientStoreConflict

NEW_MATERIAL = {
    'request_type': 'NewMaterial',
    'actor': 'requester',
    'name': 'Ball bearing 6205',
    'material_type_code': 'BRG',
    'location': {
        'department_id': 'DEP-MAINT',
        'warehouse_id': 'WH-01',
        'warehouse_name': 'Main stores',
    },
    'inventory_defaults': {'annual_usage_quantity': 365},
    'procurement_defaults': {'standard_price': 45.0, 'planned_delivery_days': 20},
}


def submit(client, payload=None):
    return client.post('/materials/requests', json=payload or NEW_MATERIAL)


def approve(client, record_id, level, approver=None):
    return client.post(
        f'/materials/requests/{record_id}/approve',
        json={'level': level, 'approver': approver or f'approver{level}'},
    )


def approved_id(client):
    record_id = submit(client).get_json()['request']['id']
    for level in (1, 2, 3):
        approve(client, record_id, level)
    return record_id


def test_submit_returns_created_request(client):
    response = submit(client)

    assert response.status_code == 201
    data = response.get_json()
    assert data['success'] is True
    assert data['request']['status'] == 'PendingApproval'
    assert data['request']['warehouse_id'] == 'WH-01'
    assert data['request']['allowed_levels'] == [1]


def test_submit_validation_error_is_400(client):
    response = submit(client, dict(NEW_MATERIAL, name=''))

    assert response.status_code == 400
    data = response.get_json()
    assert data['success'] is False
    assert data['error'] == 'validation_error'
    assert data['retryable'] is False


def test_non_json_body_is_400(client):
    response = client.post('/materials/requests', data='not json', content_type='text/plain')

    assert response.status_code == 400


def test_approval_flow(client):
    record_id = submit(client).get_json()['request']['id']

    out_of_order = approve(client, record_id, 2)
    assert out_of_order.status_code == 409
    assert out_of_order.get_json()['error'] == 'out_of_order_approval'

    assert approve(client, record_id, 1).status_code == 200
    assert approve(client, record_id, '2').status_code == 200

    pending = client.get('/materials/requests/pending?level=3').get_json()
    assert [r['id'] for r in pending] == [record_id]

    final = approve(client, record_id, 3)
    assert final.status_code == 200
    result = final.get_json()['result']
    assert result['status'] == 'Approved'
    assert result['material_code'] == 'BRG-00001'
    assert result['materialization']['stock_record_created'] is True

    again = approve(client, record_id, 3)
    assert again.status_code == 409
    assert again.get_json()['error'] == 'invalid_state'

    fetched = client.get(f'/materials/requests/{record_id}').get_json()
    assert fetched['material_code'] == 'BRG-00001'
    assert fetched['allowed_levels'] == []

    decided = client.get('/materials/requests/decided?status=Approved').get_json()
    assert [r['id'] for r in decided] == [record_id]


def test_reject(client):
    record_id = submit(client).get_json()['request']['id']

    missing_reason = client.post(f'/materials/requests/{record_id}/reject', json={'approver': 'approver1'})
    assert missing_reason.status_code == 400

    response = client.post(
        f'/materials/requests/{record_id}/reject', json={'approver': 'approver1', 'reason': 'Duplicate'}
    )
    assert response.status_code == 200
    assert response.get_json()['result']['status'] == 'Rejected'


def test_unknown_request_is_404(client):
    assert client.get('/materials/requests/4242').status_code == 404
    response = approve(client, 4242, 1)
    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'


def test_decided_rejects_unknown_status(client):
    assert client.get('/materials/requests/decided?status=PendingApproval').status_code == 400


def test_data_integrity_fault_is_500(app, client):
    record_id = submit(client).get_json()['request']['id']
    approve(client, record_id, 1)
    approve(client, record_id, 2)
    db.session.execute(text("DELETE FROM material_type_counters WHERE type_code = 'BRG'"))
    db.session.commit()

    response = approve(client, record_id, 3)

    assert response.status_code == 500
    data = response.get_json()
    assert data['error'] == 'data_integrity_fault'
    assert data['retryable'] is False


def test_transient_conflict_is_503_and_retryable(client, monkeypatch):
    def exhausted(cls, record_id, level, approver):
        raise TransientStoreConflict("approve request could not be committed after 5 attempts")

    monkeypatch.setattr(ApprovalWorkflow, 'approve', classmethod(exhausted))

    response = approve(client, 1, 1)

    assert response.status_code == 503
    assert response.get_json()['retryable'] is True


def test_stock_scan_and_detail(client):
    material_id = approved_id(client)
    extension = submit(client, {
        'request_type': 'Extension',
        'actor': 'requester',
        'material_id': material_id,
        'warehouse_id': 'WH-02',
    }).get_json()['request']
    for level in (1, 2, 3):
        approve(client, extension['id'], level)

    stock = client.get(f'/materials/{material_id}/stock').get_json()
    assert [s['warehouse_id'] for s in stock] == ['WH-01', 'WH-02']
    only_one = client.get(f'/materials/{material_id}/stock?warehouse_id=WH-02').get_json()
    assert len(only_one) == 1

    detail = client.get(f'/materials/{material_id}?warehouse_id=WH-01').get_json()
    assert detail['fields']['material_code'] == 'BRG-00001'
    assert detail['fields']['standard_price'] == 45.0
    assert detail['warehouses'] == ['WH-01', 'WH-02']

    assert client.get(f'/materials/{material_id}?warehouse_id=WH-77').status_code == 404


def test_policy_endpoints(client):
    material_id = approved_id(client)
    base = f'/materials/{material_id}/warehouses/WH-01'

    unavailable = client.get(f'{base}/policy').get_json()
    assert unavailable['replenishment']['missing'] == 'criticality_class'

    classified = client.post(f'{base}/classification', json={
        'actor': 'planner',
        'inputs': {
            'risk_hse': 3, 'production_impact': 3, 'quality_impact': 2,
            'standby_available': 'Yes', 'failure_frequency': 2, 'repair_time': 2,
        },
    })
    assert classified.status_code == 200
    # 3 + 3 + 2 + 1 + 2 + 2 = 13 -> class C; price 45 -> cost class 1
    assert classified.get_json()['classification']['criticality_class'] == 'C'
    assert classified.get_json()['classification']['cost_class'] == 1

    recommendation = client.get(f'{base}/policy?target_days_supply=10').get_json()
    assert recommendation['replenishment']['available'] is True
    assert recommendation['replenishment']['target_days_supply'] == 10

    applied = client.post(f'{base}/policy/apply', json={'actor': 'planner'})
    assert applied.status_code == 200
    levels = applied.get_json()['result']['levels']
    # 1 unit/day over 20 days, C factor 0.25
    assert levels['safety_stock_qty'] == 5
    assert levels['reorder_point_qty'] == 25
    assert levels['max_stock_level'] == 55
    assert levels['min_stock_level'] == 5

    manual = client.post(f'{base}/levels', json={
        'actor': 'planner', 'reorder_point': 30, 'safety_stock': 10, 'max_stock': 70,
    })
    assert manual.status_code == 200
    assert manual.get_json()['result']['levels']['min_stock_level'] == 10

    bad = client.post(f'{base}/levels', json={
        'actor': 'planner', 'reorder_point': 30, 'safety_stock': 10, 'max_stock': 20,
    })
    assert bad.status_code == 400

    assert client.post(f'{base}/classification', json={'inputs': {}}).status_code == 400
    assert client.get(f'{base}/policy?as_of=yesterday').status_code == 400
    assert client.get(f'/materials/{material_id}/warehouses/WH-99/policy').status_code == 404


def test_apply_without_lead_time_is_422(app, client):
    material_id = approved_id(client)
    base = f'/materials/{material_id}/warehouses/WH-01'
    client.post(f'{base}/classification', json={
        'actor': 'planner',
        'inputs': {
            'risk_hse': 5, 'production_impact': 5, 'quality_impact': 5,
            'standby_available': 'No', 'failure_frequency': 5, 'repair_time': 5,
        },
    })
    db.session.execute(text("UPDATE warehouse_stock_records SET planned_delivery_days = NULL"))
    db.session.commit()

    response = client.post(f'{base}/policy/apply', json={'actor': 'planner'})

    assert response.status_code == 422
    data = response.get_json()
    assert data['success'] is False
    assert data['result']['unavailable']['missing'] == 'lead_time'
