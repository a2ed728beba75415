"""
Stocking policy endpoints: recommendation, classification and level writes
"""

from datetime import date

from flask import jsonify, request

from material_policy.buisness.materials.errors import ValidationError
from material_policy.buisness.policy.policy_orchestrator import PolicyOrchestrator
from material_policy.presentation.routes.materials import materials_bp


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _actor(data):
    actor = data.get('actor')
    if not isinstance(actor, str) or not actor.strip():
        raise ValidationError("actor is required")
    return actor.strip()


def _optional_number(value, name, cast=float):
    if value in (None, ''):
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")


@materials_bp.get('/<int:material_id>/warehouses/<warehouse_id>/policy')
def policy_recommendation(material_id, warehouse_id):
    as_of = request.args.get('as_of', type=str)
    try:
        as_of_date = date.fromisoformat(as_of) if as_of else None
    except ValueError:
        raise ValidationError(f"as_of must be an ISO date, got {as_of!r}")
    recommendation = PolicyOrchestrator.recommend(
        material_id,
        warehouse_id,
        as_of=as_of_date,
        unit_price=_optional_number(request.args.get('unit_price'), 'unit_price'),
        annual_usage=_optional_number(request.args.get('annual_usage'), 'annual_usage'),
        target_days_supply=_optional_number(request.args.get('target_days_supply'), 'target_days_supply', int),
    )
    return jsonify(recommendation.to_dict())


@materials_bp.post('/<int:material_id>/warehouses/<warehouse_id>/classification')
def apply_classification(material_id, warehouse_id):
    data = _json_body()
    result = PolicyOrchestrator.apply_classification(
        material_id,
        warehouse_id,
        data.get('inputs') or {},
        actor=_actor(data),
        unit_price=_optional_number(data.get('unit_price'), 'unit_price'),
    )
    return jsonify({
        "success": True,
        "message": f"Classified {result.criticality_class}{result.cost_class}",
        "classification": result.to_dict(),
    })


@materials_bp.post('/<int:material_id>/warehouses/<warehouse_id>/policy/apply')
def apply_recommendation(material_id, warehouse_id):
    data = _json_body()
    result = PolicyOrchestrator.apply_recommendation(
        material_id,
        warehouse_id,
        actor=_actor(data),
        annual_usage=_optional_number(data.get('annual_usage'), 'annual_usage'),
        target_days_supply=_optional_number(data.get('target_days_supply'), 'target_days_supply', int),
    )
    if not result.applied:
        return jsonify({
            "success": False,
            "message": result.unavailable.message,
            "result": result.to_dict(),
        }), 422
    return jsonify({"success": True, "message": "Stocking levels applied", "result": result.to_dict()})


@materials_bp.post('/<int:material_id>/warehouses/<warehouse_id>/levels')
def apply_manual_levels(material_id, warehouse_id):
    data = _json_body()
    result = PolicyOrchestrator.apply_manual_parameters(
        material_id,
        warehouse_id,
        actor=_actor(data),
        reorder_point=data.get('reorder_point'),
        safety_stock=data.get('safety_stock'),
        max_stock=data.get('max_stock'),
    )
    message = "Stocking levels applied" if result.changed else "No stocking level changed"
    return jsonify({"success": True, "message": message, "result": result.to_dict()})
