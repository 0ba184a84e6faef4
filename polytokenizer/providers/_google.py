"""Google Gemini API: ``countTokens`` and ``embedContent`` over REST."""

from __future__ import annotations

from polytokenizer._models import EmbeddingResult, EmbeddingUsage
from polytokenizer.providers._base import (
    EmbeddingProvider,
    HttpProviderMixin,
    TokenizerProvider,
)
from polytokenizer.utils._exceptions import ProviderError


class GoogleProvider(HttpProviderMixin, TokenizerProvider, EmbeddingProvider):
    """Gemini API provider. Token counts and embeddings are both server-side."""

    supported_models = (
        "gemini-embedding-exp-03-07",
        "text-embedding-004",
        "gemini-embedding-001",
    )

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: int = 60,
        max_retries: int = 3,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, max_retries=max_retries)
        self._api_key = api_key
        self._base_url = (base_url or "https://generativelanguage.googleapis.com/v1beta").rstrip(
            "/"
        )

    @property
    def provider_name(self) -> str:
        return "google"

    def _url(self, model: str, method: str) -> str:
        return f"{self._base_url}/models/{model}:{method}"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "x-goog-api-key": self._api_key}

    @staticmethod
    def _content(text: str) -> dict[str, list[dict[str, str]]]:
        return {"parts": [{"text": text}]}

    async def count_tokens(self, model: str, text: str) -> int:
        if not text:
            return 0
        data = await self._post_json(
            self._url(model, "countTokens"),
            {"contents": [self._content(text)]},
            headers=self._headers(),
        )
        if "totalTokens" not in data:
            msg = f"No token count returned for model {model}"
            raise ProviderError(msg, provider=self.provider_name)
        return int(data["totalTokens"])

    async def embed(
        self,
        text: str,
        model: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult:
        self._check_model(model)

        payload: dict[str, object] = {
            "model": f"models/{model}",
            "content": self._content(text),
        }
        if dimensions is not None:
            payload["outputDimensionality"] = dimensions

        data = await self._post_json(
            self._url(model, "embedContent"), payload, headers=self._headers()
        )
        values = (data.get("embedding") or {}).get("values")
        if not values:
            msg = "No embedding returned from API"
            raise ProviderError(msg, provider=self.provider_name)

        # The Gemini API does not report usage for embeddings.
        return EmbeddingResult(
            vector=values,
            model=f"google/{model}",
            usage=EmbeddingUsage(tokens=-1),
        )
