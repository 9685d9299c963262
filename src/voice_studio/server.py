"""Voice Studio API server entry point."""

import uvicorn

from .api import create_app
from .config import get_settings


def main():
    """Run the Voice Studio API server."""
    settings = get_settings()

    app = create_app()

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
