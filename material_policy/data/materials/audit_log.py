from datetime import datetime

from material_policy import db
from material_policy.buisness.core.data_insertion_mixin import DataInsertionMixin

AUDIT_CATEGORIES = ('Approval', 'Classification', 'Criticality', 'Manual')


class AuditLogEntry(db.Model, DataInsertionMixin):
    """Append-only audit record; rows are never updated or deleted"""
    __tablename__ = 'audit_log_entries'

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    actor = db.Column(db.String(200), nullable=True)
    category = db.Column(db.String(40), nullable=False)
    action = db.Column(db.String(100), nullable=True)
    material_id = db.Column(db.Integer, nullable=True, index=True)
    warehouse_id = db.Column(db.String(100), nullable=True)
    capital_impact = db.Column(db.Float, nullable=True)
    details = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f'<AuditLogEntry {self.category} Material:{self.material_id} {self.action}>'

    @classmethod
    def append(cls, category, actor, details, material_id=None, warehouse_id=None,
               action=None, capital_impact=None):
        """Add an entry to the current session (does not commit)"""
        entry = cls(
            category=category,
            actor=actor,
            details=details,
            material_id=material_id,
            warehouse_id=warehouse_id,
            action=action,
            capital_impact=capital_impact,
        )
        db.session.add(entry)
        return entry
