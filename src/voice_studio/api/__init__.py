"""REST API for agent configuration and session provisioning."""

from .app import create_app

__all__ = ["create_app"]
