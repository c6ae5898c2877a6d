"""User override file loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import yaml

from ..exceptions import SourceReadError, SourceSyntaxError
from ..logging import get_logger

logger = get_logger(__name__)

USER_CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def resolve_user_config_path(conf_dir: Union[str, Path], environment: str) -> Path:
    """Return the override file for ``environment``.

    The first of ``<env>.config.yaml``, ``.yml`` and ``.json`` that exists
    wins; when none exists the ``.yaml`` path is returned.
    """
    base = Path(conf_dir)
    candidates = [base / f"{environment}.config{suffix}" for suffix in USER_CONFIG_SUFFIXES]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def _parse(path: Path, text: str) -> Any:
    if path.suffix == ".json":
        try:
            return json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            raise SourceSyntaxError(path, f"Invalid JSON: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SourceSyntaxError(path, f"Invalid YAML: {e}") from e
    return {} if data is None else data


def load_user_config(path: Union[str, Path]) -> Optional[Dict[str, Dict[str, Any]]]:
    """
    Load the per-environment override file.

    Returns:
        ``{namespace: {attribute: value}}``, or None if the file does not exist

    Raises:
        SourceSyntaxError: the file is unparsable or not a two-level mapping
        SourceReadError: any I/O error other than the file being absent
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No config file found, running with defaults", path=str(config_path))
        return None
    except UnicodeDecodeError as e:
        raise SourceSyntaxError(config_path, f"not valid UTF-8: {e}") from e
    except OSError as e:
        raise SourceReadError(config_path, str(e)) from e

    data = _parse(config_path, text)

    if not isinstance(data, dict):
        raise SourceSyntaxError(
            config_path, "top level must map module names to attribute mappings"
        )
    for namespace, attributes in data.items():
        if not isinstance(attributes, dict):
            raise SourceSyntaxError(
                config_path,
                f"settings for '{namespace}' must be a mapping, got {type(attributes).__name__}",
            )
    return data


def flatten_user_config(data: Dict[str, Dict[str, Any]]) -> Iterator[Tuple[str, Any]]:
    """Yield ``("<namespace>.<attribute>", value)`` pairs."""
    for namespace, attributes in data.items():
        for attribute, value in attributes.items():
            yield f"{namespace}.{attribute}", value
