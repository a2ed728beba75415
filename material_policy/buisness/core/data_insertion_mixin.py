"""
Dictionary conversion for the material models

Seeding builds rows with from_dict / find_or_create_from_dict; routes and live
queries serialise rows with to_dict.
"""

from datetime import date, datetime

from sqlalchemy import inspect

from material_policy import db
from material_policy.logger import get_logger

logger = get_logger("material_policy.buisness.core.data_insertion")

AUDIT_FIELDS = ('created_at', 'updated_at', 'created_by', 'updated_by')
TIMESTAMP_FIELDS = ('created_at', 'updated_at')


def _json_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class DataInsertionMixin:
    """Column-driven conversion between mapped rows and plain dicts"""

    @classmethod
    def _column_keys(cls):
        return [column.key for column in inspect(cls).columns]

    @classmethod
    def from_dict(cls, data_dict, actor=None, skip_fields=None):
        """
        Build an unsaved row from the keys of data_dict that are columns.

        Unknown keys are dropped. A None timestamp is left to the column default.
        When actor is given it fills created_by (if empty) and updated_by.
        """
        skipped = set(skip_fields or ())
        accepted = {}
        for key in cls._column_keys():
            if key in skipped or key not in data_dict:
                continue
            if key in TIMESTAMP_FIELDS and data_dict[key] is None:
                continue
            accepted[key] = data_dict[key]

        instance = cls(**accepted)
        if actor is not None:
            if hasattr(instance, 'created_by') and not instance.created_by:
                instance.created_by = actor
            if hasattr(instance, 'updated_by'):
                instance.updated_by = actor
        return instance

    def to_dict(self, include_audit_fields=True):
        keys = self._column_keys()
        if not include_audit_fields:
            keys = [key for key in keys if key not in AUDIT_FIELDS]
        return {key: _json_value(getattr(self, key)) for key in keys}

    @classmethod
    def find_or_create_from_dict(cls, data_dict, lookup_fields, actor=None, commit=True):
        """
        Return (row, created). The row is matched on lookup_fields; a new one is
        added to the session and, when commit is set, committed.
        """
        criteria = {field: data_dict[field] for field in lookup_fields if field in data_dict}
        if criteria:
            existing = cls.query.filter_by(**criteria).first()
            if existing is not None:
                logger.debug(f"{cls.__name__} already present for {criteria}")
                return existing, False

        instance = cls.from_dict(data_dict, actor)
        db.session.add(instance)
        if not commit:
            return instance, True
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Could not create {cls.__name__} for {criteria}: {e}")
            raise
        logger.info(f"Created {cls.__name__} for {criteria}")
        return instance, True
