# observatory/app.py
"""
App factory for running the quick-check routes as a standalone service.

    flask --app observatory.app:create_app run

Environment:
    OBSERVATORY_ENV=production   INFO logging (DEBUG otherwise)
    OBSERVATORY_*                client settings, see observatory.config.Settings
"""

from __future__ import annotations

import logging
import os
import traceback

from flask import Flask, jsonify

from observatory.client import ObservatoryClient
from observatory.tools import init_client, observatory_bp

error_logger = logging.getLogger("observatory.errors")


def _is_production() -> bool:
    return os.getenv("OBSERVATORY_ENV", "").lower() == "production"


def create_app(client: ObservatoryClient | None = None) -> Flask:
    app = Flask(__name__)

    # ── Logging ──────────────────────────────────────────────────────
    if _is_production():
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        app.logger.setLevel(logging.INFO)
    else:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
        app.logger.setLevel(logging.DEBUG)

    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    # ── Client + routes ──────────────────────────────────────────────
    init_client(app, client)
    app.register_blueprint(observatory_bp)

    # ── Global Error Handlers ────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({
            "error": "Not found",
            "message": "The requested resource was not found.",
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({
            "error": "Method not allowed",
            "message": "This HTTP method is not allowed for this endpoint.",
        }), 405

    @app.errorhandler(500)
    def internal_error(e):
        error_logger.error(
            "500 Internal Server Error:\n%s", traceback.format_exc()
        )
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
        }), 500

    @app.get("/health")
    def health():
        return jsonify(status="ok"), 200

    return app
