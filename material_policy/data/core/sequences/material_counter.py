#!/usr/bin/env python3
"""
Material Code Counter
Keyed counter rows, one per material type code, used to issue material codes
"""

from material_policy import db
from material_policy.buisness.materials.errors import DataIntegrityFault
from material_policy.logger import get_logger

logger = get_logger("material_policy.data.sequences")

CODE_WIDTH = 5


class MaterialTypeCounter(db.Model):
    """
    Last-issued sequence value for one material type.

    Only ever advanced through increment_and_get() inside a transaction run by
    run_transaction(). The version column turns two concurrent increments that
    read the same value into one success and one StaleDataError, which the
    transaction runner retries with a fresh read.
    """
    __tablename__ = 'material_type_counters'

    type_code = db.Column(db.String(20), primary_key=True)
    count = db.Column(db.Integer, nullable=True, default=0)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f'<MaterialTypeCounter {self.type_code}={self.count}>'

    @classmethod
    def create_if_not_exists(cls, type_code):
        """Create the counter row for a type at 0 (does not commit)"""
        counter = db.session.get(cls, type_code)
        if counter is None:
            counter = cls(type_code=type_code, count=0)
            db.session.add(counter)
            logger.info(f"Created material code counter for type {type_code}")
        return counter

    @classmethod
    def increment_and_get(cls, type_code):
        """
        Advance the counter for type_code and return the new value.

        Must be called inside run_transaction(): the read below is the
        transaction's own read and the increment is only durable if the commit
        wins the version check.

        Raises:
            DataIntegrityFault: If the counter row is missing or its value is corrupt
        """
        # populate_existing forces a fresh read even if the row is already in the identity map
        counter = (
            cls.query.filter_by(type_code=type_code)
            .execution_options(populate_existing=True)
            .first()
        )
        if counter is None:
            raise DataIntegrityFault(f"Material code counter for type '{type_code}' does not exist")
        if not isinstance(counter.count, int) or isinstance(counter.count, bool) or counter.count < 0:
            raise DataIntegrityFault(
                f"Material code counter for type '{type_code}' is corrupt (value={counter.count!r})"
            )
        counter.count = counter.count + 1
        return counter.count

    @classmethod
    def get_current_value(cls, type_code):
        counter = db.session.get(cls, type_code)
        return counter.count if counter else None


def format_material_code(type_code, count):
    """Build a material code such as 'PMP-00042'"""
    return f"{type_code}-{str(count).zfill(CODE_WIDTH)}"
