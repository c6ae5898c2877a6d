"""HTTP surface for the public configuration view."""

from .routes import create_config_router

__all__ = ["create_config_router"]
