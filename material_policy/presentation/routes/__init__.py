"""
Routes package for the material policy engine
JSON endpoints consumed by the inventory UI
"""

from material_policy.logger import get_logger

logger = get_logger("material_policy.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .materials import materials_bp
    app.register_blueprint(materials_bp, url_prefix='/materials')

    logger.debug("Registered materials blueprint")
