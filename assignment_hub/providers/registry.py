# FILE: assignment_hub/providers/registry.py
"""
Provider registry with failover, circuit breaker and I/O capture
"""
import json
import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional, Set

import aiofiles

from assignment_hub.config import Settings, get_settings
from assignment_hub.errors import LLMUnavailableError
from assignment_hub.governance.redaction import redact_pii
from assignment_hub.providers.gemini import GeminiProvider
from assignment_hub.providers.ollama import OllamaProvider
from assignment_hub.providers.openai import OpenAIProvider
from assignment_hub.services.correlation import get_correlation_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CircuitBreaker:
    """Simple circuit breaker for provider failover"""

    def __init__(self, threshold: int = 3, timeout_seconds: int = 60):
        self.threshold = threshold
        self.timeout_seconds = timeout_seconds
        self.failures = {}
        self.open_until = {}

    def record_failure(self, provider: str):
        """Record a failure for provider"""
        self.failures[provider] = self.failures.get(provider, 0) + 1
        if self.failures[provider] >= self.threshold:
            self.open_until[provider] = _utcnow() + timedelta(seconds=self.timeout_seconds)
            logger.warning(f"Circuit breaker opened for {provider}")

    def record_success(self, provider: str):
        """Record a success for provider"""
        self.failures[provider] = 0
        if provider in self.open_until:
            del self.open_until[provider]

    def is_open(self, provider: str) -> bool:
        """Check if circuit is open for provider"""
        if provider in self.open_until:
            if _utcnow() < self.open_until[provider]:
                return True
            # Timeout expired, reset
            del self.open_until[provider]
            self.failures[provider] = 0
        return False


class ProviderRegistry:
    """Registry of LLM providers with routing logic and I/O capture"""

    OFFLINE_PROVIDERS: Set[str] = {"ollama"}
    ONLINE_PROVIDERS: Set[str] = {"gemini", "openai"}

    def __init__(self, settings: Settings, providers: Optional[Dict[str, Any]] = None):
        self.settings = settings
        self.providers: Dict[str, Any] = {}
        self.circuit_breaker = CircuitBreaker()
        self.io_log = []  # Store recent I/O for debugging
        self.max_io_log_size = 100
        self._setup_io_log_dir()
        if providers is None:
            self._initialize_providers()
        else:
            self.providers.update(providers)

    def _setup_io_log_dir(self):
        """Setup I/O log directory"""
        self.io_log_dir = Path(self.settings.logs_dir) / "provider_io"
        if self.settings.provider_io_capture:
            self.io_log_dir.mkdir(parents=True, exist_ok=True)

    def _allowed_providers_by_mode(self) -> Set[str]:
        """
        Enforce LLM_MODE semantics:
        - offline: local only
        - online: remote only
        - hybrid: both
        """
        mode = (self.settings.llm_mode or "online").strip().lower()
        if mode == "offline":
            return set(self.OFFLINE_PROVIDERS)
        if mode == "online":
            return set(self.ONLINE_PROVIDERS)
        return set(self.OFFLINE_PROVIDERS | self.ONLINE_PROVIDERS)

    def _initialize_providers(self):
        """Initialize providers allowed by current mode"""
        allowed = self._allowed_providers_by_mode()
        settings = self.settings

        if "gemini" in allowed and settings.gemini_api_key:
            try:
                self.providers["gemini"] = GeminiProvider(
                    api_key=settings.gemini_api_key,
                    model=settings.gemini_model
                )
            except Exception as e:
                logger.warning(f"Failed to initialize Gemini: {e}")

        if "openai" in allowed and settings.openai_api_key:
            try:
                self.providers["openai"] = OpenAIProvider(
                    api_key=settings.openai_api_key,
                    model=settings.openai_model,
                    timeout=settings.router_timeout
                )
            except Exception as e:
                logger.warning(f"Failed to initialize OpenAI: {e}")

        if "ollama" in allowed:
            try:
                self.providers["ollama"] = OllamaProvider(
                    base_url=settings.ollama_base_url,
                    model=settings.ollama_model,
                    timeout=settings.router_timeout
                )
            except Exception as e:
                logger.warning(f"Failed to initialize Ollama: {e}")

        logger.info(
            f"Initialized providers (mode={settings.llm_mode}): {list(self.providers.keys())}"
        )

    def _get_provider_order(self) -> List[str]:
        """Get provider order based on policy; injected providers keep their own order"""
        if self.settings.router_policy == "offline_first":
            base = ["ollama", "gemini", "openai"]
        else:
            base = ["gemini", "openai", "ollama"]

        ordered = [p for p in base if p in self.providers]
        ordered.extend(p for p in self.providers if p not in ordered)
        return ordered

    def _sanitize_prompt(self, prompt: str, max_length: int = 2000) -> str:
        """Sanitize prompt for display (redact PII + truncate)"""
        if self.settings.redaction_enabled:
            prompt = redact_pii(prompt)

        if len(prompt) > max_length:
            return prompt[:max_length] + f"\n\n[... truncated {len(prompt) - max_length} chars]"

        return prompt

    async def _log_io(
        self,
        provider: str,
        model: str,
        prompt: str,
        output: str,
        correlation_id: Optional[str],
        duration_ms: int,
        error: Optional[str] = None
    ):
        """Log provider I/O for debugging"""
        io_entry = {
            "timestamp": _utcnow().isoformat(),
            "correlation_id": correlation_id,
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "prompt": self._sanitize_prompt(prompt),
            "output_length": len(output) if output else 0,
            "output": output,
            "duration_ms": duration_ms,
            "error": error
        }

        # Add to in-memory log (ring buffer)
        self.io_log.append(io_entry)
        if len(self.io_log) > self.max_io_log_size:
            self.io_log = self.io_log[-self.max_io_log_size:]

        if not self.settings.provider_io_capture:
            return

        # Persist to disk (daily log file)
        log_file = self.io_log_dir / f"{_utcnow().strftime('%Y-%m-%d')}.jsonl"
        try:
            async with aiofiles.open(log_file, mode="a", encoding="utf-8") as f:
                await f.write(json.dumps(io_entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.warning(f"Could not persist provider I/O entry: {e}")

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 500,
        correlation_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Generate text using first available provider with I/O capture

        Returns:
            {text: str, provider: str, model: str, usage: dict, duration_ms: int}

        Raises:
            LLMUnavailableError when no provider produced a response
        """
        correlation_id = correlation_id or get_correlation_id()
        provider_order = self._get_provider_order()
        last_error: Optional[Exception] = None

        for provider_name in provider_order:
            if self.circuit_breaker.is_open(provider_name):
                logger.debug(f"Skipping {provider_name} (circuit open)")
                continue

            provider = self.providers[provider_name]
            provider_start = time.monotonic()

            try:
                logger.info(f"[{correlation_id}] Trying provider: {provider_name}")
                result = await provider.generate(
                    prompt=prompt,
                    temperature=temperature,
                    max_tokens=max_tokens
                )

                duration_ms = int((time.monotonic() - provider_start) * 1000)
                self.circuit_breaker.record_success(provider_name)

                await self._log_io(
                    provider=provider_name,
                    model=result.get("model", "unknown"),
                    prompt=prompt,
                    output=result.get("text", "") or "",
                    correlation_id=correlation_id,
                    duration_ms=duration_ms
                )

                return {
                    **result,
                    "provider": provider_name,
                    "router_reason": f"Selected by policy: {self.settings.router_policy} (mode={self.settings.llm_mode})",
                    "duration_ms": duration_ms
                }

            except Exception as e:
                duration_ms = int((time.monotonic() - provider_start) * 1000)
                last_error = e

                logger.warning(f"[{correlation_id}] Provider {provider_name} failed: {e}")
                self.circuit_breaker.record_failure(provider_name)

                await self._log_io(
                    provider=provider_name,
                    model="unknown",
                    prompt=prompt,
                    output="",
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    error=str(e)
                )

                if not self.settings.router_fallback:
                    break
                # Continue to next provider

        raise LLMUnavailableError(
            f"All LLM providers failed (mode={self.settings.llm_mode}, policy={self.settings.router_policy}, "
            f"initialized={list(self.providers.keys())})"
        ) from last_error

    def get_recent_io(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Get recent I/O entries"""
        return self.io_log[-limit:]

    def clear_io_log(self):
        """Clear in-memory I/O log"""
        self.io_log = []

    async def aclose(self):
        """Close provider clients"""
        for name, provider in self.providers.items():
            close = getattr(provider, "aclose", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.warning(f"Failed to close provider {name}: {e}")


_registry: Optional[ProviderRegistry] = None


def get_provider_registry() -> ProviderRegistry:
    """Get or create global provider registry"""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry(get_settings())
    return _registry
