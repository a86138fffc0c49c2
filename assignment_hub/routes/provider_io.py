# FILE: assignment_hub/routes/provider_io.py
"""
Provider I/O endpoints for debugging and transparency

Prompts in the buffer are already redacted when REDACTION_ENABLED is on.
"""
import logging
from fastapi import APIRouter, Depends, Query

from assignment_hub.dependencies import get_registry
from assignment_hub.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/recent")
async def get_recent_io(
    limit: int = Query(default=20, ge=1, le=100),
    registry: ProviderRegistry = Depends(get_registry)
):
    """Most recent model calls, oldest first"""
    entries = []
    for entry in registry.get_recent_io(limit=limit):
        if not isinstance(entry, dict):
            logger.warning(f"[PROVIDER_IO] Skipping non-dict entry: {type(entry)}")
            continue
        entries.append({
            "timestamp": entry.get("timestamp", "unknown"),
            "correlation_id": entry.get("correlation_id", ""),
            "provider": entry.get("provider", "unknown"),
            "model": entry.get("model", "unknown"),
            "prompt": entry.get("prompt", ""),
            "output": entry.get("output", ""),
            "duration_ms": entry.get("duration_ms", 0),
            "error": entry.get("error")
        })

    return {
        "status": "success",
        "count": len(entries),
        "entries": entries
    }


@router.post("/clear")
async def clear_io_log(registry: ProviderRegistry = Depends(get_registry)):
    """Clear in-memory I/O log"""
    registry.clear_io_log()
    return {
        "status": "success",
        "message": "I/O log cleared"
    }
