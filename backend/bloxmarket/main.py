"""BloxMarket API — FastAPI application entry point.

Invariants:
    - Repositories are built exactly once per process (lifespan) and exposed on
      app.state.repositories for the controller layer
    - Global error handlers map BloxMarketError → structured JSON responses
    - CORS configured from settings (not hardcoded)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Module-level app for `uvicorn bloxmarket.main:app`; create_app() for tests
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bloxmarket.api.error_handlers import register_error_handlers
from bloxmarket.api.routes import health
from bloxmarket.config import get_settings
from bloxmarket.infrastructure.database import init_db
from bloxmarket.infrastructure.observability import setup_logging
from bloxmarket.services.repositories import build_repositories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(settings.database_url, **settings.engine_options())
    app.state.repositories = build_repositories(
        manager, max_attempts=settings.cas_max_attempts,
    )
    logger.info("BloxMarket domain layer started")
    yield
    await manager.dispose()
    logger.info("BloxMarket domain layer shutting down")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="BloxMarket API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Routes — explicit registration, no auto-discovery
    app.include_router(health.router)
    register_error_handlers(app)
    return app


app = create_app()
