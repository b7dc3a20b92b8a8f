"""
IBM WatsonX chat client with a cached IAM bearer token.

The IAM token is exchanged from the API key and reused until five minutes
before it expires. A 401/403 from the chat endpoint drops the cached token
so the next call performs a fresh exchange.

Usage::

    client = WatsonxClient.from_settings(settings)
    text = client.chat([{"role": "user", "content": "..."}])

Manifesto:
    The IAM exchange happens once per token lifetime, not once per
    request.  Credentials are checked before any network call.

Tags:
    notebridge, ai, watsonx, iam, httpx

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from notebridge.core.errors import ConfigError, UpstreamError
from notebridge.core.logging import get_logger
from notebridge.core.settings import NotebridgeSettings

logger = get_logger(__name__)

IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
TOKEN_EXPIRY_MARGIN_S = 300

Message = dict[str, Any]


class TokenCache:
    """A single bearer token and the monotonic time it stops being usable."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0

    def get(self) -> str | None:
        with self._lock:
            if self._token is not None and self._clock() < self._expires_at:
                return self._token
            return None

    def set(self, token: str, expires_in: float) -> None:
        with self._lock:
            self._token = token
            self._expires_at = self._clock() + expires_in - TOKEN_EXPIRY_MARGIN_S

    def clear(self) -> None:
        with self._lock:
            self._token = None
            self._expires_at = 0.0


@dataclass(frozen=True, slots=True)
class ChatOptions:
    """Sampling parameters for a chat call."""

    temperature: float = 0.4
    max_tokens: int = 6000
    top_p: float = 1
    frequency_penalty: float = 0
    presence_penalty: float = 0


class WatsonxClient:
    """Synchronous WatsonX chat client."""

    def __init__(
        self,
        *,
        api_key: str | None,
        project_id: str | None,
        chat_url: str,
        iam_url: str,
        timeout_s: float = 120.0,
        token_cache: TokenCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key
        self.project_id = project_id
        self.chat_url = chat_url
        self.iam_url = iam_url
        self.token_cache = token_cache or TokenCache()
        self._http = httpx.Client(timeout=timeout_s, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: NotebridgeSettings,
        *,
        token_cache: TokenCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> WatsonxClient:
        return cls(
            api_key=settings.watsonx_api_key,
            project_id=settings.watsonx_project_id,
            chat_url=settings.watsonx_url,
            iam_url=settings.iam_url,
            timeout_s=settings.watsonx_timeout_s,
            token_cache=token_cache,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _require_config(self) -> tuple[str, str]:
        if not self.api_key:
            raise ConfigError("WatsonX API key is not configured")
        if not self.project_id:
            raise ConfigError("WatsonX project id is not configured")
        return self.api_key, self.project_id

    def get_token(self) -> str:
        """Return the cached IAM token, exchanging the API key when stale."""
        cached = self.token_cache.get()
        if cached is not None:
            return cached

        api_key, _ = self._require_config()
        try:
            response = self._http.post(
                self.iam_url,
                data={"grant_type": IAM_GRANT_TYPE, "apikey": api_key},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError("IAM token request failed", cause=exc) from exc

        if response.status_code >= 400:
            logger.warning("watsonx_token_rejected", status=response.status_code)
            raise UpstreamError(
                f"IAM token request failed with status {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("IAM token response is not JSON", cause=exc) from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        expires_in = payload.get("expires_in") if isinstance(payload, dict) else None
        if not token or not isinstance(expires_in, (int, float)):
            raise UpstreamError("IAM token response missing access_token or expires_in")

        self.token_cache.set(token, float(expires_in))
        logger.info("watsonx_token_refreshed", expires_in=expires_in)
        return token

    def chat(
        self,
        messages: Sequence[Message],
        *,
        model_id: str,
        options: ChatOptions | None = None,
    ) -> str:
        """Send *messages* and return the first choice's content."""
        _, project_id = self._require_config()
        options = options or ChatOptions()
        token = self.get_token()

        body = {
            "messages": list(messages),
            "project_id": project_id,
            "model_id": model_id,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": options.top_p,
            "frequency_penalty": options.frequency_penalty,
            "presence_penalty": options.presence_penalty,
        }
        started = time.perf_counter()
        try:
            response = self._http.post(
                self.chat_url,
                json=body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            raise UpstreamError("WatsonX request failed", cause=exc) from exc

        if response.status_code in (401, 403):
            self.token_cache.clear()
            logger.warning("watsonx_token_invalidated", status=response.status_code)
        if response.status_code >= 400:
            raise UpstreamError(
                f"WatsonX API error: {response.status_code}",
                upstream_status=response.status_code,
                details={"body": response.text[:500]},
            )

        try:
            payload = response.json()
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError("Unexpected WatsonX response shape", cause=exc) from exc
        if not isinstance(content, str):
            raise UpstreamError("Unexpected WatsonX response shape")

        logger.info(
            "watsonx_chat_completed",
            model=model_id,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            chars=len(content),
        )
        return content
