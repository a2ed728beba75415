from material_policy import db
from material_policy.data.core.user_created_base import UserCreatedBase


class CriticalitySettingsRecord(UserCreatedBase):
    """
    Stored tenant-wide criticality configuration.

    Settings are kept as one JSON document keyed by name ('criticality'); the
    business layer overlays it on built-in defaults, so partial documents are valid.
    """
    __tablename__ = 'criticality_settings'

    name = db.Column(db.String(50), nullable=False, unique=True, default='criticality')
    settings = db.Column(db.JSON, nullable=False, default=dict)

    def __repr__(self):
        return f'<CriticalitySettingsRecord {self.name}>'
