"""
Starter override files and markdown reference docs built from module schemas.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from .config.models import SchemaDeclaration


def _store_defaults(
    properties: Mapping[str, Any],
    required: Iterable[str],
    memo: Dict[str, Any],
    include_defaults: bool,
    replace: bool,
) -> Dict[str, Any]:
    required_set = set(required)
    for attr, subschema in properties.items():
        if not isinstance(subschema, dict):
            continue
        if subschema.get("type") == "object" and isinstance(subschema.get("properties"), dict):
            existing = memo.get(attr)
            nested = _store_defaults(
                subschema["properties"],
                subschema.get("required", []),
                dict(existing) if isinstance(existing, dict) else {},
                include_defaults,
                replace,
            )
            if nested:
                memo[attr] = nested
            continue

        is_required = attr in required_set
        has_default = "default" in subschema
        should_update = replace or attr not in memo
        if should_update and ((include_defaults and has_default) or is_required):
            memo[attr] = deepcopy(subschema["default"]) if has_default else None
    return memo


def build_starter_config(
    schemas: Mapping[str, SchemaDeclaration],
    existing: Optional[Mapping[str, Any]] = None,
    include_defaults: bool = False,
    replace: bool = False,
) -> Dict[str, Dict[str, Any]]:
    """
    Build an override file skeleton.

    Required attributes without a default are written as None so the operator
    can see what still needs a value. With ``include_defaults`` every
    defaulted attribute is written too. Existing values are kept unless
    ``replace`` is set. Modules with nothing to write are omitted.
    """
    config: Dict[str, Dict[str, Any]] = {
        name: dict(values) for name, values in (existing or {}).items() if isinstance(values, dict)
    }
    for module, declaration in schemas.items():
        section = config.get(module, {})
        _store_defaults(declaration.properties, declaration.required, section, include_defaults, replace)
        config[module] = section
    return {name: values for name, values in config.items() if values}


def required_placeholders(config: Mapping[str, Any], prefix: str = "") -> List[str]:
    """Return the dotted keys that were written as None and still need a value."""
    found: List[str] = []
    for name, value in config.items():
        key = f"{prefix}{name}"
        if value is None:
            found.append(key)
        elif isinstance(value, Mapping):
            found.extend(required_placeholders(value, f"{key}."))
    return found


def write_config_file(path: Union[str, Path], config: Mapping[str, Any]) -> Path:
    """Write ``config`` as YAML, or JSON for a ``.json`` path."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        if out.suffix == ".json":
            json.dump(config, f, indent=2)
            f.write("\n")
        else:
            yaml.safe_dump(dict(config), f, sort_keys=False, default_flow_style=False)
    return out


def _inline(value: Any) -> str:
    return json.dumps(value)


def render_markdown(schemas: Mapping[str, SchemaDeclaration]) -> str:
    """Render a configuration reference for every module schema."""
    names = sorted(schemas)
    lines = ["# Configuration reference", ""]

    lines.append("## Contents")
    lines.append("")
    lines.extend(f"- [{name}](#{name})" for name in names)
    lines.append("")

    lines.append("## Example override file")
    lines.append("")
    lines.append("```yaml")
    for name in names:
        declaration = schemas[name]
        lines.append(f"{name}:")
        for attr, subschema in declaration.properties.items():
            required = "required" if attr in declaration.required else "optional"
            if subschema.get("description"):
                lines.append(f"  # {subschema['description']}")
            default = _inline(subschema.get("default")) if "default" in subschema else "null"
            lines.append(f"  {attr}: {default} # {subschema.get('type', 'any')}, {required}")
    lines.append("```")
    lines.append("")

    lines.append("## Attributes")
    for name in names:
        declaration = schemas[name]
        lines.append("")
        lines.append(f"### {name}")
        lines.append("")
        lines.append("| Attribute | Type | Required | Default | Public | Mutable | Description |")
        lines.append("|---|---|---|---|---|---|---|")
        for attr, subschema in declaration.properties.items():
            is_required = attr in declaration.required
            default = f"`{_inline(subschema['default'])}`" if "default" in subschema and not is_required else ""
            lines.append(
                "| {attr} | {type} | {required} | {default} | {public} | {mutable} | {description} |".format(
                    attr=attr,
                    type=subschema.get("type", ""),
                    required="yes" if is_required else "no",
                    default=default,
                    public="yes" if attr in declaration.public else "no",
                    mutable="yes" if attr in declaration.mutable else "no",
                    description=str(subschema.get("description", "")).replace("|", "\\|"),
                )
            )
    lines.append("")
    return "\n".join(lines)
