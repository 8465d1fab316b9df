"""Chat completions client for OpenAI-compatible generation endpoints.

Default target is the Surus functions API serving Qwen/Qwen3-1.7B.
"""

import logging

import httpx

from rag_lab.application.interfaces.chat_provider import ChatProvider
from rag_lab.domain.entities import ChatCompletionResult, ChatMessage, TokenUsage
from rag_lab.domain.exceptions import ProviderError

logger = logging.getLogger(__name__)


class ChatCompletionsClient(ChatProvider):
    """Infrastructure adapter — POSTs to ``{base_url}/v1/chat/completions``.

    Uses the injected ``httpx.AsyncClient`` when provided so connections are
    pooled across requests; otherwise a client is opened per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.surus.dev/functions",
        provider_name: str = "surus",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._provider_name = provider_name
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return self._provider_name

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _build_payload(
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict:
        payload: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=120.0)

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        """Send a non-streaming chat completion."""
        payload = self._build_payload(
            messages, model, temperature=temperature, max_tokens=max_tokens
        )
        url = f"{self._base_url}/v1/chat/completions"

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(
                    url, headers=self._get_headers(), json=payload
                )
            except httpx.TransportError as exc:
                raise ProviderError(self.provider_name, 0, str(exc)) from exc

            if response.status_code != 200:
                self._raise_provider_error(response)

            return self._parse_completion_response(response.json())

        finally:
            if should_close:
                await client.aclose()

    def _parse_completion_response(self, data: dict) -> ChatCompletionResult:
        # Error payloads can arrive with a 200 status
        if "error" in data:
            error = data["error"] or {}
            raise ProviderError(
                provider=self.provider_name,
                status_code=error.get("code", 500),
                message=error.get("message", "Unknown error"),
            )

        choices = data.get("choices", [])
        if not choices:
            raise ProviderError(
                provider=self.provider_name,
                status_code=500,
                message="No choices in response",
            )

        choice = choices[0]
        message = choice.get("message", {})
        usage_data = data.get("usage") or {}

        return ChatCompletionResult(
            model=data.get("model", ""),
            content=message.get("content", "") or "",
            finish_reason=choice.get("finish_reason", "stop") or "stop",
            usage=TokenUsage(
                prompt_tokens=usage_data.get("prompt_tokens", 0),
                completion_tokens=usage_data.get("completion_tokens", 0),
                total_tokens=usage_data.get("total_tokens", 0),
            ),
            provider=self.provider_name,
        )

    def _raise_provider_error(self, response: httpx.Response) -> None:
        """Raise ProviderError from a non-200 httpx Response."""
        try:
            data = response.json()
            error = data.get("error", {}) if isinstance(data, dict) else {}
            message = error.get("message", response.text) if isinstance(error, dict) else str(error)
        except ValueError:
            message = response.text

        logger.error(
            "Chat completion failed (%s %d): %s",
            self.provider_name,
            response.status_code,
            message[:300],
        )
        raise ProviderError(
            provider=self.provider_name,
            status_code=response.status_code,
            message=message,
        )
