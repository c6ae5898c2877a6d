"""Data types shared by the configuration layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

ENV_NAMESPACE = "env"


@dataclass(frozen=True)
class ModuleDescriptor:
    """A module that may contribute a configuration schema."""

    name: str
    root_dir: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "root_dir", Path(self.root_dir))

    def key(self, attribute: str) -> str:
        """Return the namespaced config key for ``attribute``."""
        return f"{self.name}.{attribute}"


@dataclass(frozen=True)
class SchemaDeclaration:
    """Normalised schema supplied by a single module.

    ``properties`` holds plain JSON-Schema subschemas; the layerconf markers
    (``isPublic``, ``isMutable``, property-level ``required``) have been
    lifted out into ``required``, ``public`` and ``mutable``. ``definitions``
    keeps the top-level ``definitions``/``$defs`` blocks that ``$ref`` points at.
    """

    module: str
    path: Path
    properties: Dict[str, Dict[str, Any]]
    required: Tuple[str, ...] = ()
    public: FrozenSet[str] = frozenset()
    mutable: FrozenSet[str] = frozenset()
    definitions: Dict[str, Any] = field(default_factory=dict)

    def to_json_schema(self) -> Dict[str, Any]:
        # "properties" must come before "required" so defaults are filled
        # before required-ness is checked.
        schema: Dict[str, Any] = {"type": "object", "properties": self.properties}
        if self.required:
            schema["required"] = list(self.required)
        schema.update(self.definitions)
        return schema


class IssueKind(str, Enum):
    """Category of a single attribute-level validation problem."""

    MISSING = "missing"
    TYPE = "type"
    INVALID = "invalid"


@dataclass(frozen=True)
class ValidationIssue:
    attribute: str
    kind: IssueKind
    message: str

    def describe(self, module: Optional[str] = None) -> str:
        key = f"{module}.{self.attribute}" if module else self.attribute
        return f"{key}: {self.message}"


@dataclass
class ResolutionResult:
    """Outcome of a successful schema resolution pass."""

    order: List[str] = field(default_factory=list)
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def module_count(self) -> int:
        return len(self.order)
