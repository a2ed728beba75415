"""
Material Detail View
Read model combining a catalogue material with one of its warehouse stock records.

Each displayed field is resolved by an explicit priority list of sources; the
first source holding a value wins and the winning source is reported.
"""

from typing import Any, Dict, Optional, Tuple

from material_policy import db
from material_policy.buisness.materials.errors import RecordNotFound
from material_policy.data.materials.material_master import MaterialMasterRecord
from material_policy.data.materials.warehouse_stock import INVENTORY_FIELDS, PROCUREMENT_FIELDS
from material_policy.services.materials.warehouse_stock_lookup import WarehouseStockLookup

WAREHOUSE = 'warehouse'
MASTER = 'master'
MASTER_INVENTORY_DEFAULTS = 'master_inventory_defaults'
MASTER_PROCUREMENT_DEFAULTS = 'master_procurement_defaults'

LOCATION_FIELDS = (
    'department_id', 'department_name',
    'warehouse_id', 'warehouse_name',
    'storage_location_id', 'storage_location_name',
)

# field -> sources in priority order
FIELD_PRIORITY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('material_code', (MASTER, WAREHOUSE)),
    ('name', (MASTER, WAREHOUSE)),
    ('material_type_code', (MASTER,)),
    ('material_type_name', (MASTER,)),
    ('status', (MASTER,)),
) + tuple(
    (field, (WAREHOUSE, MASTER)) for field in LOCATION_FIELDS
) + tuple(
    (field, (WAREHOUSE, MASTER_INVENTORY_DEFAULTS)) for field in INVENTORY_FIELDS
) + tuple(
    (field, (WAREHOUSE, MASTER_PROCUREMENT_DEFAULTS)) for field in PROCUREMENT_FIELDS
)

# Stock record fields with no master counterpart
WAREHOUSE_ONLY_FIELDS = ('total_lead_time_days', 'quantity_available')

# The stock record keeps the material name as material_name
_FIELD_ALIASES = {
    (WAREHOUSE, 'name'): 'material_name',
}


def _read(source_name, field, master, stock):
    if source_name == MASTER:
        return getattr(master, field, None)
    if source_name == WAREHOUSE:
        if stock is None:
            return None
        return getattr(stock, _FIELD_ALIASES.get((WAREHOUSE, field), field), None)
    if source_name == MASTER_INVENTORY_DEFAULTS:
        return (master.inventory_defaults or {}).get(field)
    if source_name == MASTER_PROCUREMENT_DEFAULTS:
        return (master.procurement_defaults or {}).get(field)
    raise ValueError(f"Unknown field source {source_name!r}")


def merge_fields(master, stock=None) -> Tuple[Dict[str, Any], Dict[str, Optional[str]]]:
    """
    Resolve every field in FIELD_PRIORITY.

    Returns:
        tuple: (values, sources) where sources[field] is the winning source or None when unset
    """
    values, sources = {}, {}
    for field, priority in FIELD_PRIORITY:
        values[field] = None
        sources[field] = None
        for source_name in priority:
            value = _read(source_name, field, master, stock)
            if value is not None:
                values[field] = value
                sources[field] = source_name
                break
    if stock is not None:
        for field in WAREHOUSE_ONLY_FIELDS:
            values[field] = getattr(stock, field)
            sources[field] = WAREHOUSE
    return values, sources


class MaterialDetailView:

    @staticmethod
    def build(material_id: int, warehouse_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Detail of a catalogue material, merged with the stock record at
        warehouse_id when given (or the material's own requested warehouse).

        Raises:
            RecordNotFound: If the material or the requested stock record does not exist
        """
        master = db.session.get(MaterialMasterRecord, material_id)
        if master is None:
            raise RecordNotFound(f"Material {material_id} not found")

        stock_records = WarehouseStockLookup.scan(master.material_id or master.id)
        target = warehouse_id or master.warehouse_id
        stock = next((s for s in stock_records if s.warehouse_id == target), None)
        if warehouse_id and stock is None:
            raise RecordNotFound(f"Material {material_id} is not extended to warehouse {warehouse_id}")

        values, sources = merge_fields(master, stock)
        return {
            'material_id': master.id,
            'fields': values,
            'sources': sources,
            'approvals': master.to_dict()['approvals'],
            'attributes': master.attributes or {},
            'warehouses': [s.warehouse_id for s in stock_records],
        }
