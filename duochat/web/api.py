"""FastAPI web application for the DuoChat debate engine."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from duochat import __version__
from duochat.config.settings import get_default_config
from duochat.web.endpoints.session import router as session_router
from duochat.web.endpoints.session import ws_router as session_ws_router
from duochat.web.endpoints.system import router as system_router
from duochat.web.session_manager import SessionManager

logger: logging.Logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the session manager on startup and stop any debate on shutdown."""
    manager: SessionManager | None = getattr(app.state, "session_manager", None)
    if manager is None:
        manager = SessionManager(get_default_config())
        app.state.session_manager = manager

    yield

    await manager.shutdown()


def get_allowed_origins() -> list[str] | None:
    """Get CORS origins from environment or use development defaults."""
    env_origins: str | None = os.environ.get("ALLOWED_ORIGINS")
    if env_origins:
        return [origin.strip() for origin in env_origins.split(",")]
    return None


def create_app(manager: SessionManager | None = None) -> FastAPI:
    app = FastAPI(
        title="DuoChat Debate Engine",
        description="Unattended two-agent voice debates",
        version=__version__,
        lifespan=lifespan,
    )
    if manager is not None:
        app.state.session_manager = manager

    allowed_origins = get_allowed_origins()
    if allowed_origins:
        logger.info(f"Setting CORS allowed origins: {allowed_origins}")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # development: any localhost origin
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(system_router)
    app.include_router(session_router)
    app.include_router(session_ws_router)
    return app


app: FastAPI = create_app()
