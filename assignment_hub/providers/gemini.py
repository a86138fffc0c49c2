# FILE: assignment_hub/providers/gemini.py
"""
Gemini (Google) provider adapter
"""
import logging
from typing import Dict, Any

from google import genai

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Gemini provider (Google)"""

    def __init__(self, api_key: str, model: str):
        self.client = genai.Client(api_key=api_key)
        self.model_name = model
        logger.info(f"Gemini provider: model={model}")

    async def generate(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        """Generate text using Gemini"""
        generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_tokens
        }

        response = await self.client.aio.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=generation_config
        )

        # .text is None when the candidate was blocked or empty
        text = response.text or ""

        usage = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "prompt_tokens": metadata.prompt_token_count,
                "completion_tokens": metadata.candidates_token_count,
                "total_tokens": metadata.total_token_count
            }

        return {
            "text": text,
            "model": self.model_name,
            "usage": usage
        }

    async def aclose(self):
        return None
