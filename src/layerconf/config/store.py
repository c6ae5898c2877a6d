"""Namespaced key/value store with public and mutable side-tables."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, ItemsView, Iterator, KeysView, Set, Tuple

from ..logging import get_logger

logger = get_logger(__name__)


def split_key(key: str) -> Tuple[str, str]:
    """Split ``"<namespace>.<attribute>"`` on the final dot."""
    namespace, _, attribute = key.rpartition(".")
    return namespace, attribute


class ConfigStore:
    """
    Flat store of config values keyed by ``"<namespace>.<attribute>"``.

    A key that already holds a value is only overwritten when it is mutable
    or the write is forced; other writes are dropped. Layers rely on this
    write-order rule for precedence.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._public: Set[str] = set()
        self._mutable: Set[str] = set()

    def has(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any, force: bool = False) -> bool:
        """Store ``value`` at ``key``.

        Returns:
            True if the value was written, False if the write was dropped
        """
        if key in self._values and key not in self._mutable and force is not True:
            logger.debug("Dropped write to immutable config key", key=key)
            return False
        self._values[key] = value
        return True

    def mark_public(self, key: str) -> None:
        self._public.add(key)

    def mark_mutable(self, key: str) -> None:
        self._mutable.add(key)

    def is_public(self, key: str) -> bool:
        return key in self._public

    def is_mutable(self, key: str) -> bool:
        return key in self._mutable

    @property
    def public_keys(self) -> Tuple[str, ...]:
        return tuple(sorted(self._public))

    @property
    def mutable_keys(self) -> Tuple[str, ...]:
        return tuple(sorted(self._mutable))

    def keys(self) -> KeysView[str]:
        return self._values.keys()

    def items(self) -> ItemsView[str, Any]:
        return self._values.items()

    def namespace(self, name: str) -> Dict[str, Any]:
        """Return the attributes stored under one namespace."""
        prefix = f"{name}."
        return {
            key[len(prefix):]: value
            for key, value in self._values.items()
            if key.startswith(prefix) and "." not in key[len(prefix):]
        }

    def to_dict(self) -> Dict[str, Any]:
        return deepcopy(self._values)

    def to_nested(self) -> Dict[str, Dict[str, Any]]:
        """Return values grouped as ``{namespace: {attribute: value}}``."""
        nested: Dict[str, Dict[str, Any]] = {}
        for key, value in sorted(self._values.items()):
            namespace, attribute = split_key(key)
            nested.setdefault(namespace, {})[attribute] = deepcopy(value)
        return nested

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return (
            f"ConfigStore(keys={len(self._values)}, public={len(self._public)}, "
            f"mutable={len(self._mutable)})"
        )
