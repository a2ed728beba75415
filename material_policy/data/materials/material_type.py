from material_policy.data.core.user_created_base import UserCreatedBase
from material_policy import db


class MaterialType(UserCreatedBase):
    """Spare/material type; its code prefixes every material code issued for the type"""
    __tablename__ = 'material_types'

    code = db.Column(db.String(20), nullable=False, unique=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<MaterialType {self.code}>'
