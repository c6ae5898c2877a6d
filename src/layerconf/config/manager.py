"""
Configuration manager for modular applications.

Wires the three configuration layers together:

1. environment variables (lowest precedence),
2. the per-environment override file, which may overwrite environment values,
3. module schemas, which fill defaults, validate, and classify attributes.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from ..exceptions import AggregateResolutionError, ConfigurationError
from ..logging import get_logger
from .env import load_environment
from .models import ModuleDescriptor, ResolutionResult
from .public import PublicView
from .resolver import SchemaResolver
from .schemas import SchemaRegistry
from .settings import ResolverSettings
from .sources import flatten_user_config, load_user_config, resolve_user_config_path
from .store import ConfigStore
from .validator import ConfigValidator, JsonSchemaValidator

logger = get_logger(__name__)


class ConfigManager:
    """
    Resolves and holds the configuration of one application instance.

    Construct one per process and pass it to the components that need
    configuration.
    """

    def __init__(
        self,
        settings: Optional[ResolverSettings] = None,
        *,
        store: Optional[ConfigStore] = None,
        validator: Optional[ConfigValidator] = None,
        registry: Optional[SchemaRegistry] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize ConfigManager.

        Args:
            settings: Resolver settings. If None, read from the environment.
            store: Store to populate; a fresh one is created by default
            validator: Schema validator; defaults to ``JsonSchemaValidator``
            registry: Schema registry; defaults to ``settings.schema_path``
            environ: Environment mapping; defaults to ``os.environ``
        """
        self.settings = settings or ResolverSettings()
        self.store = store if store is not None else ConfigStore()
        self.registry = registry or SchemaRegistry(self.settings.schema_path)
        self.validator = validator or JsonSchemaValidator(directory_tokens=self.directory_tokens)
        self.public_view = PublicView(self.store)
        self.resolver = SchemaResolver(
            self.store,
            self.validator,
            self.registry,
            core_module=self.settings.core_module,
            environment=self.settings.environment,
        )
        self._environ = environ
        self._initialized = False

    @property
    def user_config_path(self) -> Path:
        if self.settings.config_file is not None:
            return Path(self.settings.config_file)
        return resolve_user_config_path(self.settings.conf_path, self.settings.environment)

    def directory_tokens(self) -> Dict[str, Optional[str]]:
        """Values substituted for directory tokens in ``isDirectory`` properties."""
        core = self.settings.core_module
        return {
            "$ROOT": str(self.settings.root_dir.resolve()),
            "$DATA": self.store.get(f"{core}.dataDir") if core else None,
            "$TEMP": self.store.get(f"{core}.tempDir") if core else None,
        }

    def load_environment(self) -> int:
        return load_environment(self.store, self._environ, self.settings.app_prefix)

    def load_user_settings(self) -> int:
        """Copy the override file into the store, overwriting environment values."""
        data = load_user_config(self.user_config_path)
        if data is None:
            return 0
        written = 0
        for key, value in flatten_user_config(data):
            if self.store.set(key, value, force=True):
                written += 1
        logger.debug("Loaded override file", path=str(self.user_config_path), written=written)
        return written

    async def resolve_schemas(self, modules: Iterable[ModuleDescriptor]) -> ResolutionResult:
        return await self.resolver.resolve(modules)

    async def initialize(self, modules: Iterable[ModuleDescriptor]) -> ResolutionResult:
        """
        Run every layer in precedence order.

        Raises:
            SourceError: an override or schema file is unreadable or malformed
            AggregateResolutionError: one or more modules failed validation
        """
        if self._initialized:
            raise ConfigurationError("Configuration has already been initialised", "ALREADY_INITIALIZED")
        self._initialized = True

        self.load_environment()
        self.load_user_settings()
        try:
            result = await self.resolve_schemas(modules)
        except AggregateResolutionError:
            logger.error(
                "Config failed to initialise",
                environment=self.settings.environment,
                config_file=str(self.user_config_path),
            )
            raise

        logger.info(
            "Using config",
            environment=self.settings.environment,
            config_file=str(self.user_config_path),
        )
        return result

    def initialize_sync(self, modules: Iterable[ModuleDescriptor]) -> ResolutionResult:
        return asyncio.run(self.initialize(modules))

    def has(self, key: str) -> bool:
        return self.store.has(key)

    def get(self, key: str, default: Any = None) -> Any:
        return self.store.get(key, default)

    def set(self, key: str, value: Any, force: bool = False) -> bool:
        return self.store.set(key, value, force=force)

    def public_config(self, mutable_only: bool = False) -> Dict[str, Any]:
        return self.public_view.public_config(mutable_only)

    def get_config_dict(self) -> Dict[str, Dict[str, Any]]:
        """Get the full configuration as ``{namespace: {attribute: value}}``."""
        return self.store.to_nested()

    def __repr__(self) -> str:
        return (
            f"ConfigManager(environment={self.settings.environment!r}, "
            f"config_file={str(self.user_config_path)!r})"
        )
