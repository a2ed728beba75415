from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from material_policy import db
from material_policy.data.core.user_created_base import UserCreatedBase

APPROVAL_LEVELS = (1, 2, 3)


@dataclass(frozen=True)
class ApprovalSlot:
    level: int
    approved: bool
    approver: Optional[str]
    timestamp: Optional[datetime]


class MaterialMasterRecord(UserCreatedBase):
    """
    A material request and, once approved, the catalogue identity it produced.

    NewMaterial records become the catalogue item itself (material_id == id).
    Extension and Removal records point at an existing catalogue item through
    material_id and carry the warehouse they target.
    """
    __tablename__ = 'material_master_records'

    material_id = db.Column(db.Integer, db.ForeignKey('material_master_records.id'), nullable=True, index=True)
    material_code = db.Column(db.String(40), nullable=True, unique=True)
    material_type_code = db.Column(db.String(20), nullable=True)
    material_type_name = db.Column(db.String(100), nullable=True)
    name = db.Column(db.String(200), nullable=False)

    status = db.Column(db.String(30), nullable=False, default='PendingApproval')
    request_type = db.Column(db.String(30), nullable=False, default='NewMaterial')

    # Approval slots
    approver1 = db.Column(db.Boolean, nullable=False, default=False)
    approver1_by = db.Column(db.String(200), nullable=True)
    approver1_at = db.Column(db.DateTime, nullable=True)
    approver2 = db.Column(db.Boolean, nullable=False, default=False)
    approver2_by = db.Column(db.String(200), nullable=True)
    approver2_at = db.Column(db.DateTime, nullable=True)
    approver3 = db.Column(db.Boolean, nullable=False, default=False)
    approver3_by = db.Column(db.String(200), nullable=True)
    approver3_at = db.Column(db.DateTime, nullable=True)

    approved_by = db.Column(db.String(200), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    rejected_by = db.Column(db.String(200), nullable=True)
    rejected_at = db.Column(db.DateTime, nullable=True)

    # Target location
    department_id = db.Column(db.String(100), nullable=True)
    department_name = db.Column(db.String(200), nullable=True)
    warehouse_id = db.Column(db.String(100), nullable=True)
    warehouse_name = db.Column(db.String(200), nullable=True)
    storage_location_id = db.Column(db.String(100), nullable=True)
    storage_location_name = db.Column(db.String(200), nullable=True)

    # Seed values for the warehouse stock record
    inventory_defaults = db.Column(db.JSON, nullable=True)
    procurement_defaults = db.Column(db.JSON, nullable=True)
    attributes = db.Column(db.JSON, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f'<MaterialMasterRecord {self.id} {self.request_type} {self.status} {self.material_code or "(no code)"}>'

    @property
    def approvals(self):
        """The three approval slots, level 1 first"""
        return [
            ApprovalSlot(
                level=level,
                approved=bool(getattr(self, f'approver{level}')),
                approver=getattr(self, f'approver{level}_by'),
                timestamp=getattr(self, f'approver{level}_at'),
            )
            for level in APPROVAL_LEVELS
        ]

    @property
    def next_pending_level(self):
        """Lowest level not yet approved, or None when all three are granted"""
        for slot in self.approvals:
            if not slot.approved:
                return slot.level
        return None

    def grant_slot(self, level, approver, timestamp):
        setattr(self, f'approver{level}', True)
        setattr(self, f'approver{level}_by', approver)
        setattr(self, f'approver{level}_at', timestamp)

    def to_dict(self, include_audit_fields=True):
        result = super().to_dict(include_audit_fields=include_audit_fields)
        result['approvals'] = [
            {
                'level': slot.level,
                'approved': slot.approved,
                'approver': slot.approver,
                'timestamp': slot.timestamp.isoformat() if slot.timestamp else None,
            }
            for slot in self.approvals
        ]
        return result
