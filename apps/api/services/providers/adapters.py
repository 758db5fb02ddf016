"""
HTTP adapters for the supported AI providers.

Every vendor gets the same two-method contract (``analyze`` and
``normalize``). The four wire formats differ in auth header, payload envelope
and where the answer text sits in the response, so both directions
dispatch on the provider kind.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from analysis.models import CanonicalResult, Post
from analysis.parser import parse_many
from analysis.prompts import SYSTEM_PROMPT
from services.providers.types import (
    ProviderAuthError,
    ProviderConfig,
    ProviderHTTPError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)

GEMINI_TOP_P = 0.8
GEMINI_TOP_K = 40
ERROR_DETAIL_MAX_CHARS = 300

RequestParts = Tuple[Dict[str, str], Dict[str, str], Dict[str, Any]]


def _chat_completions_payload(config: ProviderConfig, prompt: str) -> Dict[str, Any]:
    return {
        "model": config.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }


def build_request(config: ProviderConfig, prompt: str) -> RequestParts:
    """Return (headers, query params, JSON body) for one provider call."""
    kind = config.kind
    if kind == "openai" or kind == "grok":
        headers = {"Authorization": f"Bearer {config.api_key}"}
        return headers, {}, _chat_completions_payload(config, prompt)
    if kind == "claude":
        headers = {
            "x-api-key": config.api_key,
            "anthropic-version": config.api_version or "2023-06-01",
        }
        payload = {
            "model": config.model,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": config.max_tokens,
        }
        return headers, {}, payload
    if kind == "gemini":
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
                "topP": GEMINI_TOP_P,
                "topK": GEMINI_TOP_K,
            },
        }
        return {}, {"key": config.api_key}, payload
    raise ValueError(f"Unsupported provider kind: {kind}")


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def extract_text(kind: str, raw: Any) -> str:
    """Locate the model's answer inside a vendor response envelope."""
    if not isinstance(raw, dict):
        return ""
    node: Any = None
    if kind == "openai" or kind == "grok":
        choice = _first(raw.get("choices"))
        message = choice.get("message") if isinstance(choice, dict) else None
        node = message.get("content") if isinstance(message, dict) else None
    elif kind == "claude":
        block = _first(raw.get("content"))
        node = block.get("text") if isinstance(block, dict) else None
    elif kind == "gemini":
        candidate = _first(raw.get("candidates"))
        content = candidate.get("content") if isinstance(candidate, dict) else None
        part = _first(content.get("parts")) if isinstance(content, dict) else None
        node = part.get("text") if isinstance(part, dict) else None
    return node if isinstance(node, str) else ""


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:ERROR_DETAIL_MAX_CHARS]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])[:ERROR_DETAIL_MAX_CHARS]
        if isinstance(error, str):
            return error[:ERROR_DETAIL_MAX_CHARS]
    return str(body)[:ERROR_DETAIL_MAX_CHARS]


class ProviderAdapter:
    """One configured AI backend."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._client = client

    @property
    def name(self) -> str:
        return self.config.kind

    def is_configured(self) -> bool:
        return self.config.is_configured()

    async def analyze(self, prompt: str) -> Dict[str, Any]:
        """
        Issue a single POST to the provider and return the decoded JSON body.

        Raises:
            ProviderAuthError: no credential, or the provider rejected it.
            ProviderTimeoutError: the call exceeded the configured timeout.
            ProviderHTTPError: non-2xx status, transport error or unreadable body.
        """
        if not self.is_configured():
            raise ProviderAuthError(self.name, f"{self.name} API key not configured")

        headers, params, payload = build_request(self.config, prompt)
        timeout = self.config.timeout_seconds
        try:
            response = await asyncio.wait_for(
                self._post(headers=headers, params=params, payload=payload),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ProviderTimeoutError(self.name, f"{self.name} request timed out after {timeout:g}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderHTTPError(self.name, f"{self.name} transport error: {exc.__class__.__name__}") from exc

        status = response.status_code
        if status in (401, 403):
            raise ProviderAuthError(self.name, f"{self.name} rejected credentials: {_error_detail(response)}", status)
        if not response.is_success:
            raise ProviderHTTPError(self.name, f"{self.name} API error {status}: {_error_detail(response)}", status)
        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderHTTPError(self.name, f"{self.name} returned a non-JSON body", status) from exc
        if not isinstance(body, dict):
            raise ProviderHTTPError(self.name, f"{self.name} returned an unexpected body", status)
        return body

    async def _post(self, *, headers: Dict[str, str], params: Dict[str, str], payload: Dict[str, Any]) -> httpx.Response:
        timeout = httpx.Timeout(self.config.timeout_seconds)
        if self._client is not None:
            return await self._client.post(
                self.config.endpoint, headers=headers, params=params, json=payload, timeout=timeout
            )
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(self.config.endpoint, headers=headers, params=params, json=payload)

    def normalize(self, raw: Dict[str, Any], post: Optional[Post] = None) -> List[CanonicalResult]:
        text = extract_text(self.name, raw)
        if not text:
            logger.warning("Provider %s returned no answer text at the expected path", self.name)
        return parse_many(text, post, provider=self.name)


def build_adapters(
    configs: Dict[str, ProviderConfig],
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, ProviderAdapter]:
    return {name: ProviderAdapter(config, client=client) for name, config in configs.items()}
