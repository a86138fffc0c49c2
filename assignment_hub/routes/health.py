# FILE: assignment_hub/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter, Depends

from assignment_hub import __version__
from assignment_hub.config import Settings
from assignment_hub.dependencies import get_app_settings, get_registry
from assignment_hub.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check(
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings)
):
    """
    Health check endpoint
    Returns llm_active=true if LLM providers are available
    """
    llm_active = len(registry.providers) > 0

    return {
        "status": "healthy",
        "version": __version__,
        "mode": settings.llm_mode,
        "store": settings.store_backend,
        "llm_active": llm_active,
        "available_providers": list(registry.providers.keys())
    }
