# FILE: assignment_hub/providers/ollama.py
"""
Ollama provider adapter
"""
import logging
import httpx
from typing import Dict, Any

from assignment_hub.providers.offline import OfflineProvider

logger = logging.getLogger(__name__)


class OllamaProvider(OfflineProvider):
    """Ollama provider"""

    def __init__(self, base_url: str, model: str, timeout: float = 60):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.client = httpx.AsyncClient(timeout=timeout)
        logger.info(f"Ollama provider: {base_url}, model: {model}")

    async def generate(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        """Generate text using Ollama"""
        url = f"{self.base_url}/api/generate"

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens
            }
        }

        response = await self.client.post(url, json=payload)
        response.raise_for_status()

        data = response.json()
        text = data.get("response", "")

        return {
            "text": text,
            "model": self.model,
            "usage": {
                "prompt_tokens": data.get("prompt_eval_count"),
                "completion_tokens": data.get("eval_count")
            }
        }

    async def aclose(self):
        await self.client.aclose()
