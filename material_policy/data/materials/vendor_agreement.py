from material_policy import db
from material_policy.data.core.user_created_base import UserCreatedBase


class VendorAgreement(UserCreatedBase):
    """Sourcing agreement for a material at a warehouse; read-only price input for classification"""
    __tablename__ = 'vendor_agreements'

    material_id = db.Column(db.Integer, db.ForeignKey('material_master_records.id'), nullable=False, index=True)
    warehouse_id = db.Column(db.String(100), nullable=True)
    vendor_name = db.Column(db.String(200), nullable=False)
    price = db.Column(db.Float, nullable=True)
    lead_time_days = db.Column(db.Integer, nullable=True)
    has_agreement = db.Column(db.Boolean, default=True)
    agreement_status = db.Column(db.String(30), default='Active')

    def __repr__(self):
        return f'<VendorAgreement {self.vendor_name} Material:{self.material_id} {self.agreement_status}>'

    @classmethod
    def active_for(cls, material_id, warehouse_id=None):
        """
        Active priced agreement for a material, preferring one scoped to the
        warehouse over a material-wide one
        """
        candidates = cls.query.filter(
            cls.material_id == material_id,
            cls.agreement_status == 'Active',
            cls.has_agreement.is_(True),
            cls.price.isnot(None),
        ).order_by(cls.id.desc()).all()
        for agreement in candidates:
            if warehouse_id and agreement.warehouse_id == warehouse_id:
                return agreement
        for agreement in candidates:
            if agreement.warehouse_id is None:
                return agreement
        return None
