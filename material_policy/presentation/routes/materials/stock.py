"""
Warehouse stock and material detail endpoints
"""

from flask import jsonify, request

from material_policy.presentation.routes.materials import materials_bp
from material_policy.services.materials.material_detail_view import MaterialDetailView
from material_policy.services.materials.warehouse_stock_lookup import WarehouseStockLookup


@materials_bp.get('/<int:material_id>/stock')
def material_stock(material_id):
    warehouse_id = request.args.get('warehouse_id', type=str)
    records = WarehouseStockLookup.scan(material_id, warehouse_id=warehouse_id)
    return jsonify([r.to_dict() for r in records])


@materials_bp.get('/<int:material_id>')
def material_detail(material_id):
    warehouse_id = request.args.get('warehouse_id', type=str)
    return jsonify(MaterialDetailView.build(material_id, warehouse_id=warehouse_id))
