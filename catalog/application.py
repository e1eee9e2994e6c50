"""Application factory for the product catalog."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from catalog.api.health import router as health_router
from catalog.api.products import router as products_router
from catalog.core.config import Settings
from catalog.core.config import get_settings
from catalog.core.errors import ErrorTranslator
from catalog.core.errors import register_error_handlers
from catalog.db.base import SessionFactory
from catalog.db.base import build_engine
from catalog.db.base import build_session_factory

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> FastAPI:
    """Build the FastAPI app with its error boundary and routers."""
    settings = settings or get_settings()
    if session_factory is None:
        session_factory = build_session_factory(build_engine(settings.database_url))

    app = FastAPI(title="Product Catalog")
    app.state.settings = settings
    app.state.session_factory = session_factory

    register_error_handlers(app, ErrorTranslator(is_production=settings.is_production))
    app.include_router(products_router)
    app.include_router(health_router)

    logger.info("Catalog app created with settings=%s", settings.safe_for_logging())
    return app
