"""Command line interface for layerconf."""

from .main import main

__all__ = ["main"]
