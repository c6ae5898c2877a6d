"""Read-only projection of public configuration."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict

from .store import ConfigStore


class PublicView:
    """Exposes only the attributes a schema marked ``isPublic``."""

    def __init__(self, store: ConfigStore):
        self._store = store

    def public_config(self, mutable_only: bool = False) -> Dict[str, Any]:
        """Return public keys and values, optionally limited to mutable keys."""
        return {
            key: deepcopy(self._store.get(key))
            for key in self._store.public_keys
            if not mutable_only or self._store.is_mutable(key)
        }
