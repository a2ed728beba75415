"""
Warehouse Stock Lookup
Cross-warehouse scan of stock records for a material.
"""

from typing import List, Optional

from material_policy.data.materials.warehouse_stock import WarehouseStockRecord


class WarehouseStockLookup:

    @staticmethod
    def scan(material_id: int, warehouse_id: Optional[str] = None) -> List[WarehouseStockRecord]:
        """Every stock record for the material, across all warehouses unless one is given"""
        query = WarehouseStockRecord.query.filter(WarehouseStockRecord.material_id == material_id)
        if warehouse_id:
            query = query.filter(WarehouseStockRecord.warehouse_id == warehouse_id)
        return query.order_by(WarehouseStockRecord.warehouse_id).all()
