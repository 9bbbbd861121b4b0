"""
DesignOS: API Initialization

Creates Flask application instance.
Builds the access catalog, registers the session gate and routes.

Usage:
    from api import create_app
    app = create_app()
"""

import os

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from api.state import EXTENSION_KEY, build_app_access
from config.system_loader import get_system_config
from core.rbac.catalog import load_access_control
from core.utils.logging_utils import attach_app_logger


# ============================================================
# CREATE FLASK APP
# ============================================================

def create_app(access=None, settings=None, scheduler=None):
    """
    Args:
        access: prebuilt AccessControl (default: config/access.yaml)
        settings: settings mapping (default: config/settings.yaml)
        scheduler: grace-timer scheduler (default: thread timers)
    """

    app = Flask(__name__)

    # --------------------------------------------------------
    # Enable CORS
    # --------------------------------------------------------
    cors_origins_raw = os.getenv("CORS_ORIGINS", "*")
    cors_origins = (
        [origin.strip() for origin in cors_origins_raw.split(",") if origin.strip()]
        if cors_origins_raw != "*"
        else "*"
    )
    CORS(app, resources={r"/api/*": {"origins": cors_origins}}, supports_credentials=cors_origins != "*")

    # --------------------------------------------------------
    # Logging
    # --------------------------------------------------------
    logger = attach_app_logger(app)

    # --------------------------------------------------------
    # Access catalog + sessions (fails fast on bad config)
    # --------------------------------------------------------
    if access is None:
        access = load_access_control()
    if settings is None:
        settings = get_system_config()

    app.extensions[EXTENSION_KEY] = build_app_access(access, settings, scheduler=scheduler)

    # --------------------------------------------------------
    # Session gate + routes
    # --------------------------------------------------------
    from api.auth.middleware import install_session_gate
    install_session_gate(app)

    from api.routes import register_routes
    register_routes(app)

    from api.auth import auth_blueprint
    app.register_blueprint(auth_blueprint, url_prefix="/auth")

    # --------------------------------------------------------
    # Global Error Handler (JSON-safe)
    # --------------------------------------------------------
    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            if e.code is None or e.code < 400:
                return e
            return jsonify({"error": e.name, "message": e.description}), e.code

        logger.exception("Unhandled Exception:")
        return jsonify({
            "error": "Internal Server Error",
            "message": str(e)
        }), 500

    return app
