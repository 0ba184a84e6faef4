"""Provider abstractions shared by every vendor adapter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import partial
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from polytokenizer.utils._exceptions import ProviderError
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from polytokenizer._models import EmbeddingResult
    from polytokenizer._types import TokenCounter

_log = get_logger(__name__)


def error_code_for_status(status_code: int | None) -> str:
    """Map an HTTP status to a stable provider error code."""
    if status_code == 401:
        return "API_KEY_INVALID"
    if status_code == 429:
        return "RATE_LIMIT"
    return "API_ERROR"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ProviderError):
        return exc.retryable
    return isinstance(exc, httpx.TransportError)


# ── Capability interfaces ──────────────────────────────────────────────


class TokenizerProvider(ABC):
    """A provider that can count tokens for its models."""

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @abstractmethod
    async def count_tokens(self, model: str, text: str) -> int: ...

    def get_tokenizer(self, model: str) -> TokenCounter:
        """Bind *model* into a ``count(text)`` coroutine function."""
        return partial(self.count_tokens, model)


class EmbeddingProvider(ABC):
    """A provider that can embed text."""

    supported_models: tuple[str, ...] = ()

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @abstractmethod
    async def embed(
        self,
        text: str,
        model: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult: ...

    def _check_model(self, model: str) -> None:
        if model not in self.supported_models:
            msg = f"Model {model} not supported for embeddings"
            raise ProviderError(msg, code="INVALID_MODEL", provider=self.provider_name)


# ── Shared httpx transport ─────────────────────────────────────────────


class HttpProviderMixin:
    """Async httpx client lifecycle plus retried JSON POSTs.

    Retries cover 429, 5xx and transport errors; everything else fails on
    the first attempt.
    """

    provider_name: str

    def __init__(self, *, timeout_seconds: int = 60, max_retries: int = 3) -> None:
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._async_client: Any = None

    def _ensure_async(self) -> None:
        if self._async_client is not None:
            return
        self._async_client = httpx.AsyncClient(timeout=float(self._timeout))
        _log.info("http_client_initialized", provider=self.provider_name)

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None

    def _error_for_response(self, resp: Any) -> ProviderError:
        status = resp.status_code
        body = resp.text
        _log.warning(
            "provider_http_error",
            provider=self.provider_name,
            status=status,
            body=body[:500],
        )
        return ProviderError(
            f"HTTP {status}. Response: {body}",
            code=error_code_for_status(status),
            provider=self.provider_name,
            status_code=status,
        )

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST *payload* and return the decoded JSON body."""
        self._ensure_async()

        @retry(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=20),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async def _send() -> dict[str, Any]:
            _log.debug("provider_request", provider=self.provider_name, url=url)
            resp = await self._async_client.post(url, json=payload, headers=headers)
            if resp.status_code >= 400:
                raise self._error_for_response(resp)
            return resp.json()

        try:
            return await _send()
        except ProviderError:
            raise
        except httpx.HTTPError as exc:
            msg = f"{self.provider_name} request failed: {exc}"
            raise ProviderError(msg, provider=self.provider_name) from exc
