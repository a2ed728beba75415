"""
Material request and approval endpoints
"""

from flask import jsonify, request

from material_policy import db
from material_policy.buisness.materials.approval_workflow import ApprovalWorkflow
from material_policy.buisness.materials.errors import RecordNotFound, ValidationError
from material_policy.buisness.materials.state_machine import ApprovalStateMachine
from material_policy.data.materials.material_master import MaterialMasterRecord
from material_policy.presentation.routes.materials import materials_bp
from material_policy.services.materials.approval_queue_service import ApprovalQueueService


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _record_payload(record):
    data = record.to_dict()
    data['allowed_levels'] = ApprovalWorkflow.get_allowed_levels(record)
    return data


@materials_bp.post('/requests')
def submit_request():
    data = _json_body()
    record = ApprovalWorkflow.submit(data, actor=data.get('actor'))
    return jsonify({
        "success": True,
        "message": f"{record.request_type} request submitted",
        "request": _record_payload(record),
    }), 201


@materials_bp.get('/requests/<int:record_id>')
def get_request(record_id):
    record = db.session.get(MaterialMasterRecord, record_id)
    if record is None:
        raise RecordNotFound(f"Material request {record_id} not found")
    return jsonify(_record_payload(record))


@materials_bp.get('/requests/pending')
def pending_requests():
    level = request.args.get('level', type=int)
    request_type = request.args.get('request_type', type=str)
    records = ApprovalQueueService.pending(level=level, request_type=request_type)
    return jsonify([_record_payload(r) for r in records])


@materials_bp.get('/requests/decided')
def decided_requests():
    status = request.args.get('status', ApprovalStateMachine.APPROVED, type=str)
    if status not in ApprovalStateMachine.TERMINAL_STATES:
        raise ValidationError(f"status must be one of {sorted(ApprovalStateMachine.TERMINAL_STATES)}")
    limit = request.args.get('limit', 100, type=int)
    return jsonify([_record_payload(r) for r in ApprovalQueueService.decided(status, limit=limit)])


@materials_bp.post('/requests/<int:record_id>/approve')
def approve_request(record_id):
    data = _json_body()
    level = data.get('level')
    if isinstance(level, str) and level.strip().isdigit():
        level = int(level.strip())
    result = ApprovalWorkflow.approve(record_id, level, approver=data.get('approver'))
    message = (
        f"Request approved; {result.materialization.summary}"
        if result.materialization else f"Approval level {result.level} granted"
    )
    return jsonify({"success": True, "message": message, "result": result.to_dict()})


@materials_bp.post('/requests/<int:record_id>/reject')
def reject_request(record_id):
    data = _json_body()
    result = ApprovalWorkflow.reject(record_id, data.get('reason'), approver=data.get('approver'))
    return jsonify({"success": True, "message": "Request rejected", "result": result.to_dict()})
