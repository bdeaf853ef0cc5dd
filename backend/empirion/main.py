"""Empirion Plans API — application factory and module-level app.

Invariants:
    - Routers are listed explicitly in ROUTERS
    - The database engine exists only between lifespan startup and shutdown
    - Every exception leaves through register_error_handlers (JSON envelope)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from empirion.api.error_handlers import register_error_handlers
from empirion.api.routes import advisor, health, history, plans
from empirion.config import Settings, get_settings
from empirion.infrastructure import database
from empirion.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

ROUTERS = (health.router, plans.router, history.router, advisor.router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Plans API ready (wizard steps={settings.plan_wizard_steps}, "
        f"advisor={'on' if settings.advisor_enabled else 'fallback only'})",
    )
    try:
        yield
    finally:
        await manager.engine.dispose()
        database.db_manager = None
        logger.info("Plans API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Empirion Plans API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return app


app = create_app()
