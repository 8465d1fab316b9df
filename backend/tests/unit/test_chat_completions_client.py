"""Unit tests for the ChatCompletionsClient."""

import json

import httpx
import pytest

from rag_lab.domain.entities import ChatMessage
from rag_lab.domain.exceptions import ProviderError
from rag_lab.infrastructure.llm import ChatCompletionsClient


# ── Helpers ──


def _mock_completion_response(
    content: str = "Hello!",
    model: str = "Qwen/Qwen3-1.7B",
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
    total_tokens: int = 15,
) -> dict:
    return {
        "id": "chatcmpl-test123",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "model": model,
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
        },
    }


def _make_mock_transport(
    response_data: dict | None = None,
    status_code: int = 200,
    captured: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, json=response_data or {})

    return httpx.MockTransport(handler)


def _client(transport: httpx.MockTransport) -> ChatCompletionsClient:
    return ChatCompletionsClient(
        api_key="test-key",
        base_url="https://llm.test/functions",
        http_client=httpx.AsyncClient(transport=transport),
    )


# ── Tests ──


@pytest.mark.asyncio
async def test_complete_parses_response():
    transport = _make_mock_transport(_mock_completion_response(content="The answer is 42."))

    result = await _client(transport).complete(
        messages=[ChatMessage(role="user", content="What is 42?")],
        model="Qwen/Qwen3-1.7B",
    )

    assert result.content == "The answer is 42."
    assert result.model == "Qwen/Qwen3-1.7B"
    assert result.finish_reason == "stop"
    assert result.usage.prompt_tokens == 10
    assert result.usage.completion_tokens == 5
    assert result.usage.total_tokens == 15
    assert result.provider == "surus"


@pytest.mark.asyncio
async def test_complete_sends_messages_and_limits():
    captured: list[httpx.Request] = []
    transport = _make_mock_transport(_mock_completion_response(), captured=captured)

    await _client(transport).complete(
        messages=[
            ChatMessage(role="system", content="Be brief."),
            ChatMessage(role="user", content="Hi"),
        ],
        model="Qwen/Qwen3-1.7B",
        max_tokens=500,
    )

    request = captured[0]
    assert str(request.url) == "https://llm.test/functions/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body == {
        "model": "Qwen/Qwen3-1.7B",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi"},
        ],
        "max_tokens": 500,
    }


@pytest.mark.asyncio
async def test_complete_error_handling():
    error_data = {"error": {"code": 429, "message": "Rate limit exceeded"}}
    transport = _make_mock_transport(error_data, status_code=429)

    with pytest.raises(ProviderError) as exc_info:
        await _client(transport).complete(
            messages=[ChatMessage(role="user", content="Hi")],
            model="Qwen/Qwen3-1.7B",
        )

    assert exc_info.value.status_code == 429
    assert "Rate limit" in exc_info.value.message


@pytest.mark.asyncio
async def test_error_body_with_200_status_is_raised():
    transport = _make_mock_transport({"error": {"code": 400, "message": "Bad model"}})

    with pytest.raises(ProviderError) as exc_info:
        await _client(transport).complete(
            messages=[ChatMessage(role="user", content="Hi")],
            model="missing",
        )

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_empty_choices_is_an_error():
    transport = _make_mock_transport({"choices": [], "model": "m"})

    with pytest.raises(ProviderError) as exc_info:
        await _client(transport).complete(
            messages=[ChatMessage(role="user", content="Hi")],
            model="m",
        )

    assert "No choices" in exc_info.value.message
