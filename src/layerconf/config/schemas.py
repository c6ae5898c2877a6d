"""Module schema discovery and normalisation."""

from __future__ import annotations

import asyncio
import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set
from urllib.parse import unquote

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from ..exceptions import SchemaSyntaxError, SourceReadError
from ..logging import get_logger
from .models import ModuleDescriptor, SchemaDeclaration

logger = get_logger(__name__)

DEFAULT_SCHEMA_PATH = "conf/config.schema.json"

# Markers understood by layerconf but not by JSON Schema.
LEGACY_MARKER_KEY = "_adapt"
PUBLIC_MARKER = "isPublic"
MUTABLE_MARKER = "isMutable"

DEFINITION_KEYS = ("definitions", "$defs")


def _strip_markers(subschema: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = deepcopy(subschema)
    cleaned.pop(PUBLIC_MARKER, None)
    cleaned.pop(MUTABLE_MARKER, None)
    cleaned.pop(LEGACY_MARKER_KEY, None)
    if isinstance(cleaned.get("required"), bool):
        cleaned.pop("required")
    nested = cleaned.get("properties")
    if isinstance(nested, dict):
        # property-level ``required: true`` moves into the parent's list
        lifted = [
            name
            for name, value in nested.items()
            if isinstance(value, dict) and value.get("required") is True
        ]
        if lifted:
            required = cleaned.get("required")
            required = list(required) if isinstance(required, list) else []
            cleaned["required"] = required + [name for name in lifted if name not in required]
        cleaned["properties"] = {
            name: _strip_markers(value) if isinstance(value, dict) else value
            for name, value in nested.items()
        }
    return cleaned


def _iter_refs(node: Any) -> Iterator[str]:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield ref
        for value in node.values():
            yield from _iter_refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_refs(item)


def _resolve_pointer(document: Any, ref: str) -> bool:
    """Return True if the local ``ref`` (``#/a/b``) points into ``document``."""
    fragment = unquote(ref[1:])
    if not fragment:
        return True
    if not fragment.startswith("/"):
        return False
    target = document
    for part in fragment[1:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(target, dict) and part in target:
            target = target[part]
        elif isinstance(target, list) and part.isdigit() and int(part) < len(target):
            target = target[int(part)]
        else:
            return False
    return True


def _check_refs(schema: Dict[str, Any], path: Path, module: str) -> None:
    for ref in _iter_refs(schema):
        if not ref.startswith("#"):
            raise SchemaSyntaxError(path, f"only local references are supported, got $ref '{ref}'", module)
        if not _resolve_pointer(schema, ref):
            raise SchemaSyntaxError(path, f"unresolvable $ref '{ref}'", module)


def _marker(subschema: Dict[str, Any], name: str) -> bool:
    legacy = subschema.get(LEGACY_MARKER_KEY)
    if isinstance(legacy, dict) and legacy.get(name):
        return True
    return bool(subschema.get(name))


def parse_schema(module: str, path: Path, raw: Any) -> SchemaDeclaration:
    """Build a ``SchemaDeclaration`` from a decoded schema document."""
    if not isinstance(raw, dict) or not isinstance(raw.get("properties"), dict):
        raise SchemaSyntaxError(path, "schema must be an object with a 'properties' object", module)

    required_list = raw.get("required", [])
    if not isinstance(required_list, list):
        raise SchemaSyntaxError(path, "'required' must be a list of attribute names", module)

    properties: Dict[str, Dict[str, Any]] = {}
    required: List[str] = [str(name) for name in required_list]
    public: Set[str] = set()
    mutable: Set[str] = set()

    for name, subschema in raw["properties"].items():
        if not isinstance(subschema, dict):
            raise SchemaSyntaxError(path, f"property '{name}' must be an object", module)
        if _marker(subschema, PUBLIC_MARKER):
            public.add(name)
        if _marker(subschema, MUTABLE_MARKER):
            mutable.add(name)
        if subschema.get("required") is True and name not in required:
            required.append(name)
        properties[name] = _strip_markers(subschema)

    declaration = SchemaDeclaration(
        module=module,
        path=path,
        properties=properties,
        required=tuple(required),
        public=frozenset(public),
        mutable=frozenset(mutable),
        definitions={key: deepcopy(raw[key]) for key in DEFINITION_KEYS if key in raw},
    )
    try:
        Draft7Validator.check_schema(declaration.to_json_schema())
    except SchemaError as e:
        raise SchemaSyntaxError(path, f"Invalid JSON schema: {e.message}", module) from e
    _check_refs(declaration.to_json_schema(), path, module)
    return declaration


class SchemaRegistry:
    """Loads each module's schema from a fixed path under its root."""

    def __init__(self, schema_path: str = DEFAULT_SCHEMA_PATH):
        self.schema_path = schema_path

    def path_for(self, module: ModuleDescriptor) -> Path:
        return module.root_dir / self.schema_path

    def load_schema(self, module: ModuleDescriptor) -> Optional[SchemaDeclaration]:
        """
        Load the schema for ``module``.

        Returns:
            The declaration, or None when the module ships no schema file

        Raises:
            SchemaSyntaxError: the file exists but is malformed
        """
        path = self.path_for(module)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No config schema for module", module=module.name)
            return None
        except UnicodeDecodeError as e:
            raise SchemaSyntaxError(path, f"not valid UTF-8: {e}", module.name) from e
        except OSError as e:
            raise SourceReadError(path, str(e)) from e

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaSyntaxError(path, f"Invalid JSON: {e}", module.name) from e
        return parse_schema(module.name, path, raw)

    async def load_all(
        self, modules: Iterable[ModuleDescriptor]
    ) -> Dict[str, SchemaDeclaration]:
        """Load every module's schema concurrently; absent schemas are omitted."""
        module_list = list(modules)
        loop = asyncio.get_running_loop()
        declarations = await asyncio.gather(
            *(loop.run_in_executor(None, self.load_schema, m) for m in module_list)
        )
        return {
            module.name: declaration
            for module, declaration in zip(module_list, declarations)
            if declaration is not None
        }
