"""
Material request variants

NewMaterial, Extension and Removal share one approval pipeline but diverge at
materialization. Each is a frozen dataclass; a MaterialRequest is one of them
and is dispatched on its type by the Materializer.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union

from material_policy.buisness.materials.errors import ValidationError


@dataclass(frozen=True)
class Location:
    """Target location: department, section (warehouse) and storage location"""
    department_id: Optional[str] = None
    department_name: Optional[str] = None
    warehouse_id: Optional[str] = None
    warehouse_name: Optional[str] = None
    storage_location_id: Optional[str] = None
    storage_location_name: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> 'Location':
        data = data or {}
        return cls(**{key: _clean(data.get(key)) for key in cls.__dataclass_fields__})

    def as_columns(self) -> Dict[str, Optional[str]]:
        return {key: getattr(self, key) for key in self.__dataclass_fields__}


@dataclass(frozen=True)
class NewMaterial:
    request_type: ClassVar[str] = 'NewMaterial'
    name: str
    material_type_code: str
    location: Location
    inventory_defaults: Dict[str, Any] = field(default_factory=dict)
    procurement_defaults: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Extension:
    request_type: ClassVar[str] = 'Extension'
    material_id: int
    location: Location
    inventory_defaults: Dict[str, Any] = field(default_factory=dict)
    procurement_defaults: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Removal:
    request_type: ClassVar[str] = 'Removal'
    material_id: int
    location: Location


MaterialRequest = Union[NewMaterial, Extension, Removal]

REQUEST_TYPES = {
    NewMaterial.request_type: NewMaterial,
    Extension.request_type: Extension,
    Removal.request_type: Removal,
}


def _clean(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _mapping(value, label):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{label} must be an object")
    return dict(value)


def _material_id(payload):
    value = payload.get('material_id')
    if value is None or isinstance(value, bool):
        raise ValidationError("material_id is required for Extension and Removal requests")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"material_id must be an integer, got {value!r}")


def parse_request(payload: Dict[str, Any]) -> MaterialRequest:
    """
    Build a request variant from submitted data, checking its shape.

    Cross-record checks (type registered, material exists) are done by
    ApprovalWorkflow.submit.

    Raises:
        ValidationError: If request_type is unknown or a required field is missing
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")

    request_type = payload.get('request_type') or NewMaterial.request_type
    if request_type not in REQUEST_TYPES:
        raise ValidationError(
            f"request_type must be one of {sorted(REQUEST_TYPES)}, got {request_type!r}"
        )

    location = Location.from_mapping(payload.get('location') or payload)

    if request_type == NewMaterial.request_type:
        name = _clean(payload.get('name'))
        if not name:
            raise ValidationError("name is required")
        type_code = _clean(payload.get('material_type_code'))
        if not type_code:
            raise ValidationError("material_type_code is required for NewMaterial requests")
        if not location.department_id:
            raise ValidationError("department_id is required")
        return NewMaterial(
            name=name,
            material_type_code=type_code,
            location=location,
            inventory_defaults=_mapping(payload.get('inventory_defaults'), 'inventory_defaults'),
            procurement_defaults=_mapping(payload.get('procurement_defaults'), 'procurement_defaults'),
            attributes=_mapping(payload.get('attributes'), 'attributes'),
        )

    material_id = _material_id(payload)
    if not location.warehouse_id:
        raise ValidationError(f"warehouse_id is required for {request_type} requests")

    if request_type == Extension.request_type:
        return Extension(
            material_id=material_id,
            location=location,
            inventory_defaults=_mapping(payload.get('inventory_defaults'), 'inventory_defaults'),
            procurement_defaults=_mapping(payload.get('procurement_defaults'), 'procurement_defaults'),
        )
    return Removal(material_id=material_id, location=location)


def request_from_record(record) -> MaterialRequest:
    """Rebuild the request variant from a stored MaterialMasterRecord"""
    location = Location(
        department_id=record.department_id,
        department_name=record.department_name,
        warehouse_id=record.warehouse_id,
        warehouse_name=record.warehouse_name,
        storage_location_id=record.storage_location_id,
        storage_location_name=record.storage_location_name,
    )
    if record.request_type == NewMaterial.request_type:
        return NewMaterial(
            name=record.name,
            material_type_code=record.material_type_code,
            location=location,
            inventory_defaults=dict(record.inventory_defaults or {}),
            procurement_defaults=dict(record.procurement_defaults or {}),
            attributes=dict(record.attributes or {}),
        )
    if record.request_type == Extension.request_type:
        return Extension(
            material_id=record.material_id,
            location=location,
            inventory_defaults=dict(record.inventory_defaults or {}),
            procurement_defaults=dict(record.procurement_defaults or {}),
        )
    if record.request_type == Removal.request_type:
        return Removal(material_id=record.material_id, location=location)
    raise ValidationError(f"Unknown request type {record.request_type!r} on record {record.id}")
