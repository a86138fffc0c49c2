# FILE: assignment_hub/providers/offline.py
"""
Base class for offline providers
"""
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)


class OfflineProvider:
    """Base class for locally hosted LLM providers"""

    async def generate(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        raise NotImplementedError

    async def aclose(self):
        """Release network resources held by the provider"""
        return None
