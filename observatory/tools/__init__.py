"""
Quick-check HTTP routes for the Observatory client.

    from observatory.tools import observatory_bp, init_client
    app.register_blueprint(observatory_bp)
    init_client(app)
"""

from observatory.tools.routes import init_client, observatory_bp

__all__ = ["observatory_bp", "init_client"]
