"""
Materializer - turns a fully approved request into stored inventory

Runs inside the approval transaction. Every read here is a fresh read so that
a retried transaction acts on current state; nothing is committed here.
"""

from dataclasses import dataclass
from typing import Optional

from material_policy import db
from material_policy.buisness.materials.errors import DataIntegrityFault
from material_policy.buisness.materials.narrator import MaterialNarrator
from material_policy.buisness.materials.requests import (
    Extension,
    NewMaterial,
    Removal,
    request_from_record,
)
from material_policy.data.core.sequences import MaterialTypeCounter, format_material_code
from material_policy.data.materials.material_master import MaterialMasterRecord
from material_policy.data.materials.warehouse_stock import WarehouseStockRecord
from material_policy.logger import get_logger

logger = get_logger("material_policy.buisness.materializer")


@dataclass(frozen=True)
class MaterializationOutcome:
    request_type: str
    material_id: int
    material_code: Optional[str]
    warehouse_id: Optional[str]
    stock_record_created: bool = False
    stock_record_deleted: bool = False
    summary: str = ""


class Materializer:
    """
    Applies the side effects of an approved request.

    Dispatches on the request variant: NewMaterial issues a code and may seed a
    stock record, Extension seeds a stock record for an existing material,
    Removal deletes one.
    """

    @classmethod
    def materialize(cls, record: MaterialMasterRecord, actor: str) -> MaterializationOutcome:
        request = request_from_record(record)
        handler = cls._HANDLERS[type(request)]
        return handler(record, request, actor)

    @staticmethod
    def _new_stock_record(material, location, inventory_defaults, procurement_defaults, actor):
        stock = WarehouseStockRecord(
            material_id=material.id,
            material_code=material.material_code,
            material_name=material.name,
            created_by=actor,
            updated_by=actor,
            **location.as_columns(),
        )
        stock.apply_defaults(inventory_defaults, procurement_defaults)
        db.session.add(stock)
        return stock

    @classmethod
    def _materialize_new(cls, record, request: NewMaterial, actor):
        count = MaterialTypeCounter.increment_and_get(request.material_type_code)
        material_code = format_material_code(request.material_type_code, count)
        record.material_code = material_code
        record.material_id = record.id

        created = False
        warehouse_id = request.location.warehouse_id
        if warehouse_id:
            if WarehouseStockRecord.find_for(record.id, warehouse_id) is not None:
                raise DataIntegrityFault(
                    f"Stock record for new material {record.id} already exists at {warehouse_id}"
                )
            cls._new_stock_record(
                record, request.location, request.inventory_defaults, request.procurement_defaults, actor
            )
            created = True

        logger.info(f"Issued material code {material_code} for request {record.id}")
        return MaterializationOutcome(
            request_type=request.request_type,
            material_id=record.id,
            material_code=material_code,
            warehouse_id=warehouse_id,
            stock_record_created=created,
            summary=MaterialNarrator.code_issued(material_code, warehouse_id),
        )

    @classmethod
    def _load_material(cls, material_id, record):
        material = (
            MaterialMasterRecord.query.filter_by(id=material_id)
            .execution_options(populate_existing=True)
            .first()
        )
        if material is None:
            raise DataIntegrityFault(
                f"Material {material_id} referenced by request {record.id} no longer exists"
            )
        return material

    @classmethod
    def _materialize_extension(cls, record, request: Extension, actor):
        material = cls._load_material(request.material_id, record)
        warehouse_id = request.location.warehouse_id
        if WarehouseStockRecord.find_for(material.id, warehouse_id) is not None:
            raise DataIntegrityFault(
                f"Material {material.material_code} is already extended to {warehouse_id}"
            )
        cls._new_stock_record(
            material, request.location, request.inventory_defaults, request.procurement_defaults, actor
        )
        logger.info(f"Extended material {material.material_code} to {warehouse_id} (request {record.id})")
        return MaterializationOutcome(
            request_type=request.request_type,
            material_id=material.id,
            material_code=material.material_code,
            warehouse_id=warehouse_id,
            stock_record_created=True,
            summary=MaterialNarrator.extended(material.material_code, warehouse_id),
        )

    @classmethod
    def _materialize_removal(cls, record, request: Removal, actor):
        material = cls._load_material(request.material_id, record)
        warehouse_id = request.location.warehouse_id
        stock = WarehouseStockRecord.find_for(material.id, warehouse_id)
        if stock is not None:
            db.session.delete(stock)
            logger.info(f"Removed material {material.material_code} from {warehouse_id} (request {record.id})")
        else:
            logger.warning(
                f"Removal request {record.id}: material {material.material_code} has no stock record "
                f"at {warehouse_id}; nothing to delete"
            )
        return MaterializationOutcome(
            request_type=request.request_type,
            material_id=material.id,
            material_code=material.material_code,
            warehouse_id=warehouse_id,
            stock_record_deleted=stock is not None,
            summary=MaterialNarrator.removed(material.material_code, warehouse_id, stock is not None),
        )


Materializer._HANDLERS = {
    NewMaterial: Materializer._materialize_new,
    Extension: Materializer._materialize_extension,
    Removal: Materializer._materialize_removal,
}
