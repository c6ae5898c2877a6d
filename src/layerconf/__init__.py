"""
layerconf: layered configuration for modular applications.

Resolves environment variables, a per-environment override file and
per-module JSON schemas into one namespaced store, validating every module
and reporting all failures together.
"""

__version__ = "0.1.0"

from .config import ConfigManager, ConfigStore, ModuleDescriptor, ResolverSettings
from .exceptions import AggregateResolutionError, ConfigurationError
from .logging import setup_logging

__all__ = [
    "AggregateResolutionError",
    "ConfigManager",
    "ConfigStore",
    "ConfigurationError",
    "ModuleDescriptor",
    "ResolverSettings",
    "setup_logging",
]
