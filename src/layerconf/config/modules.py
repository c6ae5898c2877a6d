"""Module list handling: ordering and the YAML manifest used by the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

import yaml

from ..exceptions import NamespaceCollisionError, SourceSyntaxError
from ..logging import get_logger
from .models import ENV_NAMESPACE, ModuleDescriptor

logger = get_logger(__name__)


def order_modules(
    modules: Iterable[ModuleDescriptor], core_module: Optional[str] = None
) -> List[ModuleDescriptor]:
    """
    Return ``modules`` with the core module first.

    Raises:
        NamespaceCollisionError: duplicate names or a module named ``env``
    """
    ordered: List[ModuleDescriptor] = []
    seen: Set[str] = set()
    core: Optional[ModuleDescriptor] = None

    for module in modules:
        if module.name == ENV_NAMESPACE:
            raise NamespaceCollisionError(module.name, "is reserved for environment passthrough")
        if module.name in seen:
            raise NamespaceCollisionError(module.name)
        seen.add(module.name)
        if core_module is not None and module.name == core_module:
            core = module
        else:
            ordered.append(module)

    if core is not None:
        ordered.insert(0, core)
    elif core_module is not None:
        logger.warning("Core module not found in module list", core_module=core_module)
    return ordered


@dataclass
class ModuleManifest:
    core: Optional[str] = None
    modules: List[ModuleDescriptor] = field(default_factory=list)


def load_module_manifest(path: Union[str, Path]) -> ModuleManifest:
    """
    Load a manifest of the form::

        core: my-app-core
        modules:
          - name: my-app-core
            root: ./core

    Roots are resolved relative to the manifest's directory.
    """
    manifest_path = Path(path)
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SourceSyntaxError(manifest_path, f"Invalid YAML: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("modules", []), list):
        raise SourceSyntaxError(manifest_path, "manifest must contain a 'modules' list")

    base_dir = manifest_path.parent
    modules: List[ModuleDescriptor] = []
    for entry in data.get("modules", []):
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("root"):
            raise SourceSyntaxError(manifest_path, f"module entry needs 'name' and 'root': {entry!r}")
        modules.append(ModuleDescriptor(str(entry["name"]), base_dir / str(entry["root"])))

    core = data.get("core")
    return ModuleManifest(core=str(core) if core else None, modules=modules)
