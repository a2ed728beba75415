"""
JSON error responses for the materials blueprint
"""

from flask import jsonify

from material_policy.buisness.materials.errors import (
    DataIntegrityFault,
    MaterialDomainError,
    RecordNotFound,
    StateConflict,
    TransientStoreConflict,
    ValidationError,
)
from material_policy.logger import get_logger
from material_policy.presentation.routes.materials import materials_bp

logger = get_logger("material_policy.routes.errors")

# Checked in order; subclasses before their parents
STATUS_CODES = (
    (ValidationError, 400),
    (RecordNotFound, 404),
    (StateConflict, 409),
    (TransientStoreConflict, 503),
    (DataIntegrityFault, 500),
)


def status_for(error):
    for error_type, status in STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


@materials_bp.errorhandler(MaterialDomainError)
def handle_domain_error(error):
    status = status_for(error)
    if isinstance(error, DataIntegrityFault):
        logger.error(f"Data integrity fault: {error}")
    elif status >= 500:
        logger.warning(f"{error.__class__.__name__}: {error}")
    else:
        logger.info(f"Rejected request ({error.code}): {error}")

    return jsonify({
        "success": False,
        "error": error.code,
        "message": str(error),
        "retryable": bool(getattr(error, 'retryable', False)),
    }), status
