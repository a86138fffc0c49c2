# FILE: tests/test_providers.py
"""Tests for provider adapters that can run without credentials"""
import json

import httpx
import pytest

from assignment_hub.providers.ollama import OllamaProvider


@pytest.mark.asyncio
async def test_ollama_request_and_response_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": '{"questions": []}', "eval_count": 12})

    provider = OllamaProvider(base_url="http://ollama.local:11434/", model="llama3.2:3b")
    await provider.client.aclose()
    provider.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    result = await provider.generate("prompt text", temperature=0.4, max_tokens=256)
    await provider.aclose()

    assert seen["url"] == "http://ollama.local:11434/api/generate"
    assert seen["body"]["options"] == {"temperature": 0.4, "num_predict": 256}
    assert seen["body"]["stream"] is False
    assert result["text"] == '{"questions": []}'
    assert result["usage"]["completion_tokens"] == 12


@pytest.mark.asyncio
async def test_ollama_http_error_propagates():
    provider = OllamaProvider(base_url="http://ollama.local:11434", model="llama3.2:3b")
    await provider.client.aclose()
    provider.client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
    )

    with pytest.raises(httpx.HTTPStatusError):
        await provider.generate("prompt", temperature=0.0, max_tokens=10)
    await provider.aclose()
