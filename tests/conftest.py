"""Shared fixtures for layerconf tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import yaml

from layerconf.config import ConfigStore, ModuleDescriptor, ResolverSettings


@pytest.fixture
def store() -> ConfigStore:
    return ConfigStore()


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    """Application root with an empty ``conf`` directory."""
    root = tmp_path / "app"
    (root / "conf").mkdir(parents=True)
    return root


@pytest.fixture
def write_schema(tmp_path: Path):
    """Create a module directory holding ``conf/config.schema.json``."""

    def _write(
        name: str,
        properties: Dict[str, Any],
        required: Optional[List[str]] = None,
    ) -> ModuleDescriptor:
        root_dir = tmp_path / "modules" / name
        schema_file = root_dir / "conf" / "config.schema.json"
        schema_file.parent.mkdir(parents=True, exist_ok=True)
        document: Dict[str, Any] = {"type": "object", "properties": properties}
        if required is not None:
            document["required"] = required
        schema_file.write_text(json.dumps(document), encoding="utf-8")
        return ModuleDescriptor(name, root_dir)

    return _write


@pytest.fixture
def write_override(app_root: Path):
    """Write the per-environment override file under ``app_root/conf``."""

    def _write(data: Dict[str, Any], environment: str = "testing") -> Path:
        path = app_root / "conf" / f"{environment}.config.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(app_root: Path) -> ResolverSettings:
    return ResolverSettings(root_dir=app_root, environment="testing")
