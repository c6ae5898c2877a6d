"""Shared helpers for the CLI commands."""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import click
import yaml

from ..config import ConfigManager, ModuleDescriptor, ResolverSettings, load_module_manifest
from ..exceptions import ConfigurationError
from ..logging import REDACTED, is_sensitive_key

DEFAULT_MANIFEST = "modules.yaml"


def parse_module_spec(spec: str) -> Tuple[str, str]:
    """Split a ``NAME=PATH`` option value."""
    name, sep, path = spec.partition("=")
    if not sep or not name or not path:
        raise click.BadParameter(f"expected NAME=PATH, got {spec!r}", param_hint="--module")
    return name, path


def build_manager(ctx: click.Context) -> Tuple[ConfigManager, List[ModuleDescriptor]]:
    """
    Create a ConfigManager and module list from the root group's options.

    Modules given with ``--module`` win over the manifest. Without either,
    ``<root>/conf/modules.yaml`` is used when it exists.
    """
    obj = ctx.obj or {}
    overrides: Dict[str, Any] = dict(obj.get("settings_overrides", {}))
    settings = ResolverSettings(**overrides)

    specs = obj.get("module_specs") or ()
    if specs:
        modules = []
        for spec in specs:
            name, path = parse_module_spec(spec)
            modules.append(ModuleDescriptor(name, Path(path)))
        return ConfigManager(settings), modules

    manifest_path = obj.get("manifest") or settings.conf_path / DEFAULT_MANIFEST
    if not Path(manifest_path).is_file():
        raise ConfigurationError(
            f"No modules given and no manifest found at {manifest_path}",
            "NO_MODULES",
        )
    manifest = load_module_manifest(manifest_path)
    if settings.core_module is None and manifest.core:
        settings = settings.model_copy(update={"core_module": manifest.core})
    return ConfigManager(settings), manifest.modules


def mask_sensitive(config: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Replace values of secret-looking attributes with a placeholder."""
    masked: Dict[str, Dict[str, Any]] = {}
    for section, values in config.items():
        masked[section] = {
            key: (REDACTED if value is not None else None) if is_sensitive_key(key) else value
            for key, value in values.items()
        }
    return masked


def render(data: Dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=True, default_flow_style=False).rstrip("\n")
    return json.dumps(data, indent=2, sort_keys=True, default=str)


def handle_errors(func: Callable) -> Callable:
    """Report configuration errors as a one-line failure and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            click.secho(f"✗ {e}", fg="red", err=True)
            raise click.exceptions.Exit(1) from e

    return wrapper
