"""
ApprovalWorkflow - Domain facade for the material request approval lifecycle

Provides submit / approve / reject. Approve and reject run inside
run_transaction so the final approval, code issuance and stock record write
commit together or not at all.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from material_policy import db
from material_policy.buisness.materials.errors import RecordNotFound, ValidationError
from material_policy.buisness.materials.materializer import MaterializationOutcome, Materializer
from material_policy.buisness.materials.narrator import MaterialNarrator
from material_policy.buisness.materials.requests import (
    Extension,
    NewMaterial,
    Removal,
    parse_request,
)
from material_policy.buisness.materials.state_machine import ApprovalStateMachine
from material_policy.data.core.transaction import run_transaction
from material_policy.data.materials.audit_log import AuditLogEntry
from material_policy.data.materials.material_master import MaterialMasterRecord
from material_policy.data.materials.material_type import MaterialType
from material_policy.data.materials.warehouse_stock import WarehouseStockRecord
from material_policy.logger import get_logger

logger = get_logger("material_policy.buisness.approval")

AUDIT_CATEGORY = 'Approval'


@dataclass(frozen=True)
class ApprovalResult:
    record_id: int
    level: int
    status: str
    materialization: Optional[MaterializationOutcome] = None

    @property
    def material_code(self):
        return self.materialization.material_code if self.materialization else None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'record_id': self.record_id,
            'level': self.level,
            'status': self.status,
            'material_code': self.material_code,
        }
        if self.materialization:
            result['materialization'] = {
                'request_type': self.materialization.request_type,
                'material_id': self.materialization.material_id,
                'warehouse_id': self.materialization.warehouse_id,
                'stock_record_created': self.materialization.stock_record_created,
                'stock_record_deleted': self.materialization.stock_record_deleted,
                'summary': self.materialization.summary,
            }
        return result


def _require_actor(actor, label='approver'):
    if not isinstance(actor, str) or not actor.strip():
        raise ValidationError(f"{label} is required")
    return actor.strip()


def _load_record(record_id) -> MaterialMasterRecord:
    """Fresh read of a request; a stale identity-map copy must never drive a transition"""
    record = (
        MaterialMasterRecord.query.filter_by(id=record_id)
        .execution_options(populate_existing=True)
        .first()
    )
    if record is None:
        raise RecordNotFound(f"Material request {record_id} not found")
    return record


class ApprovalWorkflow:
    """
    Material request approvals.

    PendingApproval -> Approved once levels 1, 2 and 3 are granted in order;
    PendingApproval -> Rejected on any rejection. Both are terminal.
    """

    @classmethod
    def submit(cls, payload: Dict[str, Any], actor: str) -> MaterialMasterRecord:
        """
        Validate and store a new request in PendingApproval.

        Raises:
            ValidationError: If the request is malformed or refers to something that does not exist
        """
        actor = _require_actor(actor, 'actor')
        request = parse_request(payload)

        def unit():
            record = MaterialMasterRecord(
                request_type=request.request_type,
                status=ApprovalStateMachine.PENDING,
                created_by=actor,
                updated_by=actor,
                **request.location.as_columns(),
            )
            if isinstance(request, NewMaterial):
                material_type = MaterialType.query.filter_by(code=request.material_type_code).first()
                if material_type is None or not material_type.is_active:
                    raise ValidationError(f"Material type {request.material_type_code!r} is not registered")
                record.name = request.name
                record.material_type_code = material_type.code
                record.material_type_name = material_type.name
                record.inventory_defaults = request.inventory_defaults
                record.procurement_defaults = request.procurement_defaults
                record.attributes = request.attributes
            else:
                material = cls._approved_material(request.material_id)
                stocked = WarehouseStockRecord.find_for(material.id, request.location.warehouse_id) is not None
                if isinstance(request, Extension) and stocked:
                    raise ValidationError(
                        f"Material {material.material_code} is already extended to {request.location.warehouse_id}"
                    )
                if isinstance(request, Removal) and not stocked:
                    raise ValidationError(
                        f"Material {material.material_code} is not extended to {request.location.warehouse_id}"
                    )
                record.material_id = material.id
                record.name = payload.get('name') or material.name
                record.material_type_code = material.material_type_code
                record.material_type_name = material.material_type_name
                if isinstance(request, Extension):
                    record.inventory_defaults = request.inventory_defaults
                    record.procurement_defaults = request.procurement_defaults

            db.session.add(record)
            db.session.flush()
            AuditLogEntry.append(
                AUDIT_CATEGORY, actor, MaterialNarrator.request_submitted(record),
                material_id=record.material_id, warehouse_id=record.warehouse_id, action='submitted',
            )
            return record

        record = run_transaction(unit, description=f"submit {request.request_type} request")
        logger.info(f"{record.request_type} request {record.id} submitted by {actor}")
        return record

    @staticmethod
    def _approved_material(material_id) -> MaterialMasterRecord:
        material = db.session.get(MaterialMasterRecord, material_id)
        if (
            material is None
            or material.request_type != NewMaterial.request_type
            or material.status != ApprovalStateMachine.APPROVED
        ):
            raise ValidationError(f"Material {material_id} is not an approved catalogue material")
        return material

    @classmethod
    def approve(cls, record_id: int, level: int, approver: str) -> ApprovalResult:
        """
        Grant one approval level.

        Granting level 3 after levels 1 and 2 approves the request and
        materializes it in the same transaction.

        Raises:
            RecordNotFound: If the request does not exist
            ValidationError: If level is not 1-3 or approver is blank
            OutOfOrderApproval: If a lower level is still open
            InvalidState: If the request is already Approved or Rejected
            DataIntegrityFault: If materialization finds corrupt or missing data
            TransientStoreConflict: If concurrent writers exhausted the retry budget
        """
        approver = _require_actor(approver)

        def unit():
            record = _load_record(record_id)
            ApprovalStateMachine.validate_approval(record, level)

            now = datetime.utcnow()
            final = ApprovalStateMachine.completes_approval(record, level)
            record.grant_slot(level, approver, now)
            record.updated_by = approver

            if not final:
                AuditLogEntry.append(
                    AUDIT_CATEGORY, approver, MaterialNarrator.slot_granted(record, level, approver),
                    material_id=record.material_id, warehouse_id=record.warehouse_id,
                    action=f'level_{level}_approved',
                )
                return ApprovalResult(record_id=record.id, level=level, status=record.status)

            ApprovalStateMachine.validate_transition(record.status, ApprovalStateMachine.APPROVED)
            record.status = ApprovalStateMachine.APPROVED
            record.approved_by = approver
            record.approved_at = now
            outcome = Materializer.materialize(record, actor=approver)
            AuditLogEntry.append(
                AUDIT_CATEGORY, approver, MaterialNarrator.request_approved(record, outcome.summary),
                material_id=outcome.material_id, warehouse_id=outcome.warehouse_id, action='approved',
            )
            return ApprovalResult(record_id=record.id, level=level, status=record.status, materialization=outcome)

        result = run_transaction(unit, description=f"approve request {record_id} level {level}")
        if result.materialization:
            logger.info(f"Request {record_id} approved by {approver}: {result.materialization.summary}")
        else:
            logger.info(f"Request {record_id} level {level} approved by {approver}")
        return result

    @classmethod
    def reject(cls, record_id: int, reason: str, approver: str) -> ApprovalResult:
        """
        Reject a pending request regardless of how many levels were granted.

        Raises:
            RecordNotFound: If the request does not exist
            ValidationError: If reason or approver is blank
            InvalidState: If the request is already Approved or Rejected
        """
        approver = _require_actor(approver)
        if not isinstance(reason, str) or not reason.strip():
            raise ValidationError("A rejection reason is required")
        reason = reason.strip()

        def unit():
            record = _load_record(record_id)
            ApprovalStateMachine.validate_transition(record.status, ApprovalStateMachine.REJECTED)
            approved_levels = sum(1 for slot in record.approvals if slot.approved)
            record.status = ApprovalStateMachine.REJECTED
            record.rejection_reason = reason
            record.rejected_by = approver
            record.rejected_at = datetime.utcnow()
            record.updated_by = approver
            AuditLogEntry.append(
                AUDIT_CATEGORY, approver, MaterialNarrator.request_rejected(record, reason, approved_levels),
                material_id=record.material_id, warehouse_id=record.warehouse_id, action='rejected',
            )
            return ApprovalResult(record_id=record.id, level=approved_levels, status=record.status)

        result = run_transaction(unit, description=f"reject request {record_id}")
        logger.info(f"Request {record_id} rejected by {approver}")
        return result

    @staticmethod
    def get_allowed_levels(record: MaterialMasterRecord):
        """The levels that can be granted now: one level while pending, none once terminal"""
        level = ApprovalStateMachine.allowed_level(record)
        return [level] if level is not None else []
