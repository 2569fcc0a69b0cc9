"""Application factory and process entry point."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import assignments, capacity, catalog, config, projects, resources
from app.core.config import Settings
from app.core.errors import install_error_handlers
from app.core.logging import configure_logging, get_logger
from app.core.responses import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS
from app.db.session import Database
from app.services.capacity import NO_ABSENCES, AbsenceProvider

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    absences: AbsenceProvider | None = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)
    owns_db = database is None
    db = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.create_tables:
            db.create_all()
            logger.info("db.tables.created")
        logger.info("app.startup")
        yield
        if owns_db:
            db.dispose()
        logger.info("app.shutdown")

    app = FastAPI(title="Resource Planner API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.absences = absences or NO_ABSENCES

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    install_error_handlers(app)

    for module in (config, resources, projects, assignments, capacity, catalog):
        app.include_router(module.router)

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


def run() -> None:
    import uvicorn

    from app.core.config import settings

    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
