"""
Application factory.

Run with: uvicorn life_manager.main:create_app --factory --port 3000
(from the backend/ directory, or anywhere once the package is installed)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import router as auth_router
from .config import Settings, get_settings
from .database import close_db_pool, init_db_pool
from .errors import install_error_handlers
from .goals import router as goals_router
from .income import router as income_router
from .summary import router as summary_router
from .tasks import router as tasks_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.db_pool = await init_db_pool(app.state.settings.database_url)
    yield
    await close_db_pool(app.state.db_pool)
    app.state.db_pool = None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.db_pool = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(income_router)
    app.include_router(goals_router)
    app.include_router(tasks_router)
    app.include_router(summary_router)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Backend running successfully"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info("%s configured", settings.app_name)
    return app
