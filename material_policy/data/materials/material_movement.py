from material_policy import db
from material_policy.data.core.user_created_base import UserCreatedBase

MOVEMENT_TYPES = ('ISSUE', 'RECEIPT', 'ADJUSTMENT')


class MaterialMovement(UserCreatedBase):
    """
    Historical consumption event. Written by the stores transactions that move
    material; read-only for the policy engine.
    """
    __tablename__ = 'material_movements'

    material_id = db.Column(db.Integer, db.ForeignKey('material_master_records.id'), nullable=False, index=True)
    warehouse_id = db.Column(db.String(100), nullable=True, index=True)
    movement_type = db.Column(db.String(20), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    movement_date = db.Column(db.DateTime, nullable=False, index=True)
    reference = db.Column(db.String(100), nullable=True)

    __table_args__ = (
        db.CheckConstraint(
            "movement_type IN ('ISSUE', 'RECEIPT', 'ADJUSTMENT')",
            name='ck_material_movement_type'
        ),
    )

    def __repr__(self):
        return f'<MaterialMovement {self.movement_type} Material:{self.material_id} Qty:{self.quantity}>'

    @classmethod
    def issues_since(cls, material_id, since, warehouse_id=None):
        """ISSUE movements for a material (optionally one warehouse) dated on or after `since`"""
        query = cls.query.filter(
            cls.material_id == material_id,
            cls.movement_type == 'ISSUE',
            cls.movement_date >= since,
        )
        if warehouse_id:
            query = query.filter(cls.warehouse_id == warehouse_id)
        return query.order_by(cls.movement_date).all()
