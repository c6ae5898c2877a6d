"""Settings controlling how configuration is resolved."""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .env import DEFAULT_APP_PREFIX
from .schemas import DEFAULT_SCHEMA_PATH


class ResolverSettings(BaseSettings):
    """Resolver settings, overridable through ``LAYERCONF_*`` variables."""

    app_prefix: str = Field(
        default=DEFAULT_APP_PREFIX,
        description="Prefix marking environment variables that target a module",
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("LAYERCONF_ENVIRONMENT", "NODE_ENV", "environment"),
        description="Deployment environment; selects the override file",
    )
    root_dir: Path = Field(default=Path("."), description="Application root directory")
    conf_dir: str = Field(default="conf", description="Override file directory, relative to root_dir")
    config_file: Optional[Path] = Field(
        default=None, description="Explicit override file; bypasses the per-environment lookup"
    )
    schema_path: str = Field(
        default=DEFAULT_SCHEMA_PATH, description="Schema location relative to each module root"
    )
    core_module: Optional[str] = Field(
        default=None, description="Module resolved before all others"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level",
    )
    log_format: str = Field(default="console", pattern="^(json|console)$", description="Log format")

    model_config = SettingsConfigDict(
        env_prefix="LAYERCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def conf_path(self) -> Path:
        return self.root_dir / self.conf_dir
