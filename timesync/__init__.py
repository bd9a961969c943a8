"""
project: TimeSync
module: __init__.py
License: MIT

Flask application factory for the level generator service.

The engine itself lives in ``timesync.level`` and has no web dependency at
call time; this module only wires it to HTTP. Configuration is sourced from
environment variables (optionally via a .env file) with defaults suited to
local development.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

# Load .env if present so TIMESYNC_* tunables can be supplied without
# exporting shell variables during development.
load_dotenv()

__version__ = "0.1.0"


def _env_int(name: str):
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-integer %s=%r", name, raw)
        return None


def create_app(test_config: dict | None = None) -> Flask:
    """Build a configured Flask app with the level API registered."""
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        # Generation tunables; unset values fall back to engine defaults
        TIMESYNC_MAX_ATTEMPTS=_env_int("TIMESYNC_MAX_ATTEMPTS"),
        TIMESYNC_MAX_SEARCH_STATES=_env_int("TIMESYNC_MAX_SEARCH_STATES"),
        TIMESYNC_ENABLE_GENERATION_METRICS=bool(os.getenv("TIMESYNC_ENABLE_GENERATION_METRICS", "1") == "1"),
    )
    if test_config:
        app.config.update(test_config)

    from timesync.routes.level_api import bp_level

    app.register_blueprint(bp_level)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(500)
    def internal_error(e):
        error_id = uuid.uuid4().hex[:8]
        logging.exception("Unhandled exception (id=%s)", error_id)
        return jsonify({"error": "internal server error", "error_id": error_id}), 500

    return app
