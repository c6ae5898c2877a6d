"""
Routes exposing the public configuration subset.

Only attributes a schema marked public are ever served; everything else
stays server-side.
"""

from typing import Any, Dict

from fastapi import APIRouter, Query

from ..config.manager import ConfigManager


def create_config_router(manager: ConfigManager) -> APIRouter:
    """Build a router that serves ``manager``'s public configuration."""
    router = APIRouter(prefix="/config", tags=["config"])

    @router.get("")
    async def get_public_config(
        mutable: bool = Query(False, description="Only return attributes that may change at runtime"),
    ) -> Dict[str, Any]:
        """Public configuration as a flat ``{"module.attribute": value}`` mapping."""
        return manager.public_config(mutable_only=mutable)

    return router
