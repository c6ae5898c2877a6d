"""Layered configuration: environment, override file, module schemas."""

from .env import env_var_to_config_key, load_environment
from .manager import ConfigManager
from .models import (
    IssueKind,
    ModuleDescriptor,
    ResolutionResult,
    SchemaDeclaration,
    ValidationIssue,
)
from .modules import ModuleManifest, load_module_manifest, order_modules
from .public import PublicView
from .resolver import SchemaResolver
from .schemas import SchemaRegistry
from .settings import ResolverSettings
from .sources import flatten_user_config, load_user_config
from .store import ConfigStore
from .validator import ConfigValidator, JsonSchemaValidator

__all__ = [
    "ConfigManager",
    "ConfigStore",
    "ConfigValidator",
    "IssueKind",
    "JsonSchemaValidator",
    "ModuleDescriptor",
    "ModuleManifest",
    "PublicView",
    "ResolutionResult",
    "ResolverSettings",
    "SchemaDeclaration",
    "SchemaRegistry",
    "SchemaResolver",
    "ValidationIssue",
    "env_var_to_config_key",
    "flatten_user_config",
    "load_environment",
    "load_module_manifest",
    "load_user_config",
    "order_modules",
]
