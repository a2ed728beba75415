import os
from pathlib import Path

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from material_policy.logger import get_logger

db = SQLAlchemy()
migrate = Migrate()


def _default_database_uri():
    """DATABASE_URL, else a SQLite file in <project>/instance/"""
    configured = os.environ.get('DATABASE_URL')
    if configured:
        return configured
    instance_dir = Path(__file__).resolve().parent.parent / 'instance'
    instance_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{instance_dir / 'material_policy.db'}"


def create_app(test_config=None):
    """
    Application factory.

    Args:
        test_config (dict, optional): Config values applied after the environment,
            used by the test suite to point at an in-memory database.
    """
    logger = get_logger("material_policy")
    app = Flask(__name__)

    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')
    if test_config:
        app.config.update(test_config)
    # No fallback key
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY is not set, refusing to start")
        raise RuntimeError("SECRET_KEY environment variable is required")

    app.config.setdefault('SQLALCHEMY_DATABASE_URI', None)
    if not app.config['SQLALCHEMY_DATABASE_URI']:
        app.config['SQLALCHEMY_DATABASE_URI'] = _default_database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Attempt budget for optimistic transactions (approval materialization, policy writes)
    app.config.setdefault(
        'MATERIAL_TXN_MAX_ATTEMPTS',
        int(os.environ.get('MATERIAL_TXN_MAX_ATTEMPTS', '5'))
    )

    db.init_app(app)
    migrate.init_app(app, db)
    logger.debug(f"Database backend: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Registers every model on db.metadata
    from material_policy.data.materials import build
    build.build_models()

    from material_policy.presentation.routes import init_app as init_routes
    init_routes(app)

    logger.info("Material Policy Engine app created")
    return app
