"""OpenAI: local tiktoken counting, embeddings over the REST API."""

from __future__ import annotations

import tiktoken

from polytokenizer._models import EmbeddingResult, EmbeddingUsage
from polytokenizer.providers._base import (
    EmbeddingProvider,
    HttpProviderMixin,
    TokenizerProvider,
)
from polytokenizer.utils._exceptions import ProviderError

_O200K_PREFIXES = ("gpt-4.1", "gpt-4o", "o1", "o3", "o4")
_CL100K_PREFIXES = ("gpt-4", "gpt-3.5", "text-embedding")


def encoding_name_for_model(model: str | None) -> str:
    """Pick the tiktoken encoding an OpenAI model family uses."""
    if not model:
        return "cl100k_base"
    if model.startswith(_O200K_PREFIXES):
        return "o200k_base"
    if model.startswith(_CL100K_PREFIXES):
        return "cl100k_base"
    return "gpt2"


class OpenAIProvider(HttpProviderMixin, TokenizerProvider, EmbeddingProvider):
    """Counts tokens locally with tiktoken; embeds via ``/v1/embeddings``."""

    supported_models = (
        "text-embedding-3-small",
        "text-embedding-3-large",
        "text-embedding-ada-002",
    )

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com",
        timeout_seconds: int = 60,
        max_retries: int = 3,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, max_retries=max_retries)
        self._api_key = api_key
        self._base_url = (base_url or "https://api.openai.com").rstrip("/")
        self._encodings: dict[str, tiktoken.Encoding] = {}

    @property
    def provider_name(self) -> str:
        return "openai"

    # -- tokenization -------------------------------------------------------

    def _encoding(self, model: str | None) -> tiktoken.Encoding:
        name = encoding_name_for_model(model)
        if name not in self._encodings:
            self._encodings[name] = tiktoken.get_encoding(name)
        return self._encodings[name]

    async def count_tokens(self, model: str, text: str) -> int:
        if not text:
            return 0
        return len(self._encoding(model).encode(text, disallowed_special=()))

    def encode(self, model: str, text: str) -> list[int]:
        return self._encoding(model).encode(text, disallowed_special=())

    def decode(self, model: str, tokens: list[int]) -> str:
        return self._encoding(model).decode(tokens)

    # -- embeddings ---------------------------------------------------------

    def _embeddings_url(self) -> str:
        base = self._base_url
        if not base.endswith("/v1"):
            base = f"{base}/v1"
        return f"{base}/embeddings"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def embed(
        self,
        text: str,
        model: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult:
        self._check_model(model)

        payload: dict[str, object] = {"model": model, "input": text}
        if dimensions is not None:
            payload["dimensions"] = dimensions

        data = await self._post_json(self._embeddings_url(), payload, headers=self._headers())

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as exc:
            msg = "No embedding returned from API"
            raise ProviderError(msg, provider=self.provider_name) from exc

        tokens = data.get("usage", {}).get("prompt_tokens", 0)
        return EmbeddingResult(
            vector=vector,
            model=f"openai/{model}",
            usage=EmbeddingUsage(tokens=tokens),
        )
