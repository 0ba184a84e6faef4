"""Anthropic: token counting through the ``messages.count_tokens`` endpoint.

Uses the native ``anthropic`` SDK, which carries its own retry loop, so no
tenacity wrapper is added here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from polytokenizer.providers._base import TokenizerProvider, error_code_for_status
from polytokenizer.utils._exceptions import ProviderError, ProviderNotAvailableError
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from polytokenizer._models import Message

_log = get_logger(__name__)


class AnthropicProvider(TokenizerProvider):
    """Counts tokens server-side; Anthropic has no public local tokenizer."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "",
        timeout_seconds: int = 60,
        max_retries: int = 3,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._async_client: Any = None

    @property
    def provider_name(self) -> str:
        return "anthropic"

    # -- client lifecycle ---------------------------------------------------

    def _ensure_async(self) -> None:
        if self._async_client is not None:
            return
        try:
            import anthropic
        except ImportError:
            raise ProviderNotAvailableError(
                "anthropic package required. Install with: pip install anthropic",
                provider="anthropic",
            ) from None
        kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "timeout": float(self._timeout),
            "max_retries": self._max_retries,
        }
        if self._base_url:
            kwargs["base_url"] = self._base_url
        self._async_client = anthropic.AsyncAnthropic(**kwargs)
        _log.info("anthropic_async_client_initialized")

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.close()
            self._async_client = None

    # -- public API ---------------------------------------------------------

    async def count_tokens(self, model: str, text: str) -> int:
        if not text:
            return 0
        return await self._count(model, [{"role": "user", "content": text}])

    async def count_tokens_for_messages(
        self,
        model: str,
        messages: Sequence[Message],
        system_prompt: str | None = None,
    ) -> int:
        """Count a whole conversation as Anthropic would bill it.

        System-role messages are folded into the ``system`` parameter; every
        other non-assistant role is sent as ``user``.
        """
        system_parts = [m.content for m in messages if m.role == "system"]
        if system_prompt:
            system_parts.insert(0, system_prompt)
        payload = [
            {"role": "assistant" if m.role == "assistant" else "user", "content": m.content}
            for m in messages
            if m.role != "system"
        ]
        system = "\n\n".join(system_parts) or None
        return await self._count(model, payload, system=system)

    async def _count(
        self,
        model: str,
        messages: list[dict[str, str]],
        system: str | None = None,
    ) -> int:
        self._ensure_async()
        kwargs: dict[str, Any] = {"model": model, "messages": messages}
        if system:
            kwargs["system"] = system
        try:
            response = await self._async_client.messages.count_tokens(**kwargs)
        except Exception as exc:
            status = getattr(exc, "status_code", None)
            _log.warning("anthropic_count_failed", model=model, status=status, error=str(exc))
            raise ProviderError(
                f"Anthropic count_tokens failed: {exc}",
                code=error_code_for_status(status),
                provider="anthropic",
                status_code=status,
            ) from exc
        return response.input_tokens
