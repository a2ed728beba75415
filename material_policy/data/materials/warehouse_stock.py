from material_policy import db
from material_policy.data.core.user_created_base import UserCreatedBase

# Keys accepted from a request's inventory defaults when seeding a stock record
INVENTORY_FIELDS = (
    'issuable_quantity',
    'reserved_quantity',
    'min_stock_level',
    'max_stock_level',
    'reorder_point_qty',
    'safety_stock_qty',
    'order_quantity',
    'annual_usage_quantity',
    'target_days_supply',
    'stock_level_determination',
    'inventory_uom',
    'criticality_risk_hse',
    'criticality_production_impact',
    'criticality_impact_quality',
    'criticality_standby_available',
    'criticality_failure_frequency',
    'criticality_repair_time',
    'criticality_score',
    'criticality_class',
    'cost_class',
    'service_level_target',
    'bin',
)

# Keys accepted from a request's procurement defaults
PROCUREMENT_FIELDS = (
    'standard_price',
    'purchasing_processing_days',
    'planned_delivery_days',
    'gr_processing_days',
    'preferred_vendor_id',
)


class WarehouseStockRecord(UserCreatedBase):
    """A catalogue material extended to one warehouse (section), with its stocking data"""
    __tablename__ = 'warehouse_stock_records'

    material_id = db.Column(db.Integer, db.ForeignKey('material_master_records.id'), nullable=False, index=True)
    material_code = db.Column(db.String(40), nullable=True)
    material_name = db.Column(db.String(200), nullable=True)

    # Location
    department_id = db.Column(db.String(100), nullable=True)
    department_name = db.Column(db.String(200), nullable=True)
    warehouse_id = db.Column(db.String(100), nullable=False)
    warehouse_name = db.Column(db.String(200), nullable=True)
    storage_location_id = db.Column(db.String(100), nullable=True)
    storage_location_name = db.Column(db.String(200), nullable=True)
    bin = db.Column(db.String(100), nullable=True)

    # Inventory data
    inventory_uom = db.Column(db.String(20), nullable=True)
    issuable_quantity = db.Column(db.Float, default=0.0)
    reserved_quantity = db.Column(db.Float, default=0.0)
    min_stock_level = db.Column(db.Float, nullable=True)
    max_stock_level = db.Column(db.Float, nullable=True)
    reorder_point_qty = db.Column(db.Float, nullable=True)
    safety_stock_qty = db.Column(db.Float, nullable=True)
    order_quantity = db.Column(db.Float, nullable=True)
    annual_usage_quantity = db.Column(db.Float, nullable=True)
    target_days_supply = db.Column(db.Integer, nullable=True)
    stock_level_determination = db.Column(db.String(40), nullable=True)

    # Criticality
    criticality_risk_hse = db.Column(db.Integer, nullable=True)
    criticality_production_impact = db.Column(db.Integer, nullable=True)
    criticality_impact_quality = db.Column(db.Integer, nullable=True)
    criticality_standby_available = db.Column(db.String(3), nullable=True)
    criticality_failure_frequency = db.Column(db.Integer, nullable=True)
    criticality_repair_time = db.Column(db.Integer, nullable=True)
    criticality_score = db.Column(db.Float, nullable=True)
    criticality_class = db.Column(db.String(1), nullable=True)
    cost_class = db.Column(db.Integer, nullable=True)
    service_level_target = db.Column(db.Float, nullable=True)

    # Procurement data
    standard_price = db.Column(db.Float, nullable=True)
    purchasing_processing_days = db.Column(db.Integer, nullable=True)
    planned_delivery_days = db.Column(db.Integer, nullable=True)
    gr_processing_days = db.Column(db.Integer, nullable=True)
    preferred_vendor_id = db.Column(db.String(100), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __table_args__ = (
        db.UniqueConstraint('material_id', 'warehouse_id', name='uix_material_warehouse'),
    )
    __mapper_args__ = {"version_id_col": version_id}

    material = db.relationship('MaterialMasterRecord', foreign_keys=[material_id])

    def __repr__(self):
        return f'<WarehouseStockRecord Material:{self.material_id} Warehouse:{self.warehouse_id}>'

    @property
    def total_lead_time_days(self):
        """Purchasing processing + planned delivery + goods receipt processing"""
        return (
            (self.purchasing_processing_days or 0)
            + (self.planned_delivery_days or 0)
            + (self.gr_processing_days or 0)
        )

    @property
    def quantity_available(self):
        return (self.issuable_quantity or 0.0) - (self.reserved_quantity or 0.0)

    def apply_defaults(self, inventory_defaults, procurement_defaults):
        """Copy the whitelisted seed values from a request onto this record"""
        for key in INVENTORY_FIELDS:
            if inventory_defaults and inventory_defaults.get(key) is not None:
                setattr(self, key, inventory_defaults[key])
        for key in PROCUREMENT_FIELDS:
            if procurement_defaults and procurement_defaults.get(key) is not None:
                setattr(self, key, procurement_defaults[key])

    @classmethod
    def find_for(cls, material_id, warehouse_id):
        """Fresh read of the stock record for one (material, warehouse) pair, or None"""
        return (
            cls.query.filter_by(material_id=material_id, warehouse_id=warehouse_id)
            .execution_options(populate_existing=True)
            .first()
        )
