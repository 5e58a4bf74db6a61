"""HTTP surface of the proxy."""

from __future__ import annotations

from flask import Flask

from expvar_proxy.api.proxy import proxy_bp


def register_blueprints(app: Flask) -> None:
    """Register all blueprints on the application."""
    app.register_blueprint(proxy_bp)
