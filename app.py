#!/usr/bin/env python3
"""
Start the Material Policy Engine, or only build its database with --build-only.

Settings come from .env (see generate_env.py).
"""

import argparse
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from material_policy import create_app  # noqa: E402
from material_policy.data.materials.build import build_database  # noqa: E402
from material_policy.logger import get_logger  # noqa: E402

logger = get_logger("material_policy.run")


def env_flag(name, default='False'):
    return os.environ.get(name, default).strip().lower() in ('true', '1', 'yes', 'on')


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description='Material Policy Engine')
    parser.add_argument('--build-only', action='store_true',
                        help='create tables and seed critical data, then exit')
    parser.add_argument('--no-seed', action='store_false', dest='seed_defaults',
                        help='create tables without seeding criticality settings and material types')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    app = create_app()
    build_database(app, seed_defaults=args.seed_defaults)

    if args.build_only:
        logger.info("Database built, not starting the server")
        return 0

    debug = env_flag('FLASK_DEBUG')
    reloader = env_flag('USE_RELOADER')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug:
        logger.warning("Flask debug mode is on")
    logger.info(f"Serving on {host}:{port} (debug={debug}, reloader={reloader})")
    app.run(debug=debug, host=host, port=port, use_reloader=reloader)
    return 0


if __name__ == '__main__':
    sys.exit(main())
