"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from .errors import register_exception_handlers
from .routers import agents, auth, livekit, sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    settings.ensure_data_dirs()
    logging.getLogger().setLevel(settings.log_level.upper())
    logging.info("Voice Studio API starting up...")
    yield
    logging.info("Voice Studio API shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Voice Studio API",
        description="Configure and test real-time voice AI agents",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Configure CORS for dashboard access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/v1/auth", tags=["auth"])
    app.include_router(agents.router, prefix="/v1/agents", tags=["agents"])
    app.include_router(livekit.router, prefix="/v1/livekit", tags=["livekit"])
    app.include_router(sessions.router, prefix="/v1/sessions", tags=["sessions"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    return app
