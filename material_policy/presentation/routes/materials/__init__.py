from flask import Blueprint

materials_bp = Blueprint('materials', __name__)

# Import all route modules
from . import (  # noqa: E402,F401
    errors,
    requests,
    stock,
    policy,
)
