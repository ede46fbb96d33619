"""Client for OpenAI-compatible ``/chat/completions`` endpoints."""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any

import httpx

from chatlink.config import EndpointSettings
from chatlink.llm_errors import AuthenticationError
from chatlink.llm_errors import ContextLengthError
from chatlink.llm_errors import InvalidRequestError
from chatlink.llm_errors import InvalidResponseError
from chatlink.llm_errors import LLMError
from chatlink.llm_errors import LLMTimeoutError
from chatlink.llm_errors import ProviderUnavailableError
from chatlink.llm_errors import RateLimitError

from .protocol import ChatReply
from .protocol import StreamCallback

logger = logging.getLogger(__name__)

ANTHROPIC_HOST = "api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


class OpenAICompatibleClient:
    """Implementation of CompletionClientProtocol over httpx.

    Works with OpenAI and the providers that mirror its API (Anthropic's
    OpenAI-compatible endpoint, Mistral, Groq, local servers). No retries:
    failures surface as LLMError subclasses.
    """

    def __init__(
        self,
        endpoint: EndpointSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.endpoint.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> OpenAICompatibleClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def get_headers(self) -> dict[str, str]:
        api_key = self.endpoint.api_key or ""
        if ANTHROPIC_HOST in self.endpoint.base_url:
            return {
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            }
        return {
            "Authorization": f"Bearer {api_key}",
            "content-type": "application/json",
        }

    def build_body(self, request: dict[str, Any], streaming: bool) -> dict[str, Any]:
        body = dict(request)
        body.setdefault("model", self.endpoint.model)
        if "max_completion_tokens" not in body and "max_tokens" not in body:
            body["max_completion_tokens"] = self.endpoint.max_completion_tokens

        # Mistral takes max_tokens instead of max_completion_tokens
        if self.endpoint.name == "Mistral AI" and "max_completion_tokens" in body:
            body["max_tokens"] = body.pop("max_completion_tokens")

        body["stream"] = streaming
        return body

    async def complete(
        self,
        request: dict[str, Any],
        stream_callback: StreamCallback | None = None,
    ) -> ChatReply:
        if not self.endpoint.api_key:
            raise AuthenticationError(
                f"No API key configured for {self.endpoint.name}", provider=self.endpoint.name
            )

        streaming = bool(request.get("stream")) and stream_callback is not None
        body = self.build_body(request, streaming)
        url = f"{self.endpoint.base_url}/chat/completions"
        logger.info(f"Sending chat request to {self.endpoint.name} (model={body['model']})")

        try:
            if streaming:
                async with self.client.stream(
                    "POST", url, headers=self.get_headers(), json=body
                ) as response:
                    if response.is_error:
                        await response.aread()
                        raise self._translate_status(response)
                    return await self._read_stream(response, stream_callback)

            response = await self.client.post(url, headers=self.get_headers(), json=body)
        except LLMError:
            raise
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request to {self.endpoint.name} timed out", provider=self.endpoint.name
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(
                f"Network request failed: {e}", provider=self.endpoint.name
            ) from e

        if response.is_error:
            raise self._translate_status(response)
        return self._parse_reply(response)

    def _parse_reply(self, response: httpx.Response) -> ChatReply:
        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Failed to parse API response: {e}", provider=self.endpoint.name
            ) from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices, list):
            raise InvalidResponseError(
                "Invalid API response structure: Missing choices", provider=self.endpoint.name
            )
        message = choices[0].get("message")
        if not message:
            raise InvalidResponseError(
                "Invalid API response structure: Missing message", provider=self.endpoint.name
            )
        return ChatReply(
            role=message.get("role") or "assistant", content=message.get("content") or ""
        )

    async def _read_stream(
        self, response: httpx.Response, stream_callback: StreamCallback | None
    ) -> ChatReply:
        text = ""
        async for line in response.aiter_lines():
            line = line.strip()
            if not line.startswith("data:"):
                continue
            data = line[len("data:") :].strip()
            if data == "[DONE]":
                break
            try:
                chunk = json.loads(data)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed stream chunk: {data[:80]}")
                continue

            choices = chunk.get("choices") or [{}]
            fragment = (choices[0].get("delta") or {}).get("content")
            if not fragment:
                continue
            text += fragment
            if stream_callback is not None:
                result = stream_callback(fragment)
                if inspect.isawaitable(result):
                    await result

        return ChatReply(role="assistant", content=text)

    def _translate_status(self, response: httpx.Response) -> LLMError:
        """Map an HTTP error response onto the LLMError taxonomy."""
        status = response.status_code
        provider = self.endpoint.name
        detail = _error_detail(response) or response.reason_phrase
        message = f"API Error ({status}): {detail}"

        if status in (401, 403):
            return AuthenticationError(message, provider=provider, status_code=status)
        if status == 429:
            retry_after = response.headers.get("retry-after")
            try:
                seconds = float(retry_after) if retry_after else None
            except ValueError:
                seconds = None
            return RateLimitError(
                message, retry_after=seconds, provider=provider, status_code=status
            )
        if status == 413 or "context length" in detail.lower():
            return ContextLengthError(message, provider=provider, status_code=status)
        if status >= 500:
            return ProviderUnavailableError(message, provider=provider, status_code=status)
        return InvalidRequestError(message, provider=provider, status_code=status)


def _error_detail(response: httpx.Response) -> str | None:
    """Pull the ``error`` message out of a JSON error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict) or not data.get("error"):
        return None
    error = data["error"]
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return json.dumps(error)
