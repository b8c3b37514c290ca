"""FastAPI application entrypoint for the service hours tracker."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.router import api_router
from .core.config import get_settings
from .core.database import SessionLocal, init_db
from .jobs import register_scheduler
from .services import identity_service, migration_service

logger = logging.getLogger(__name__)


def prepare_database() -> None:
    """Create tables, apply pending data migrations and seed admin policies."""

    init_db()
    session = SessionLocal()
    try:
        applied = migration_service.run_pending(session)
        seeded = identity_service.seed_role_policies(session, get_settings().admin_emails)
        session.commit()
        logger.info("database ready (migrations applied: %s, admin policies seeded: %d)", applied or "none", seeded)
    except Exception:
        session.rollback()
        logger.exception("database preparation failed")
        raise
    finally:
        session.close()


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Service Hours API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api/v1")

    @app.on_event("startup")
    def on_startup() -> None:
        prepare_database()

    register_scheduler(app)
    return app


app = create_app()
