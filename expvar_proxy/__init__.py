"""Application factory for the expvar proxy."""

from __future__ import annotations

import logging

from expvar_proxy.api import register_blueprints
from expvar_proxy.app import App
from expvar_proxy.config import Settings
from expvar_proxy.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> App:
    """Application factory used by both tests and runtime."""

    logger.info("Creating app")

    if settings is None:
        settings = Settings.load()

    # Every request is a scrape target, so there is no static route
    app = App(__name__, static_folder=None)

    container = ServiceContainer(config=settings)
    container.wire(modules=["expvar_proxy.api.proxy"])
    app.container = container

    register_blueprints(app)

    return app
