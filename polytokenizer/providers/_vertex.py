"""Vertex AI text embeddings via the ``:predict`` endpoint.

Authenticates with a service-account JSON object through ``google-auth``;
the blocking token refresh runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any

from polytokenizer._models import EmbeddingResult, EmbeddingUsage
from polytokenizer.providers._base import EmbeddingProvider, HttpProviderMixin
from polytokenizer.utils._exceptions import (
    ConfigurationError,
    ProviderError,
    ProviderNotAvailableError,
)
from polytokenizer.utils._logging import get_logger

_log = get_logger(__name__)

_SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)


class VertexAIProvider(HttpProviderMixin, EmbeddingProvider):
    """Embedding-only provider; Vertex exposes no token counting here."""

    supported_models = (
        "text-embedding-005",
        "text-embedding-004",
        "text-multilingual-embedding-002",
    )

    def __init__(
        self,
        project_id: str,
        location: str = "us-central1",
        credentials: dict[str, Any] | None = None,
        timeout_seconds: int = 60,
        max_retries: int = 3,
    ) -> None:
        if not credentials or not isinstance(credentials, dict):
            msg = "Vertex AI credentials must be provided as a service account object"
            raise ConfigurationError(msg)
        super().__init__(timeout_seconds=timeout_seconds, max_retries=max_retries)
        self._project_id = project_id
        self._location = location
        self._credentials_info = credentials
        self._credentials: Any = None

    @property
    def provider_name(self) -> str:
        return "vertex"

    def _ensure_credentials(self) -> Any:
        if self._credentials is not None:
            return self._credentials
        try:
            from google.oauth2 import service_account
        except ImportError:
            raise ProviderNotAvailableError(
                "google-auth package required. Install with: pip install 'polytokenizer[vertex]'",
                provider="vertex",
            ) from None
        self._credentials = service_account.Credentials.from_service_account_info(
            self._credentials_info, scopes=list(_SCOPES)
        )
        _log.info("vertex_credentials_loaded", project=self._project_id)
        return self._credentials

    async def _access_token(self) -> str:
        credentials = self._ensure_credentials()
        if not credentials.valid:
            from google.auth.transport.requests import Request

            try:
                await asyncio.to_thread(credentials.refresh, Request())
            except Exception as exc:
                msg = f"Failed to get access token: {exc}"
                raise ProviderError(msg, code="API_KEY_INVALID", provider="vertex") from exc
        return credentials.token

    def _endpoint(self, model: str) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/projects/{self._project_id}"
            f"/locations/{self._location}/publishers/google/models/{model}:predict"
        )

    async def embed(
        self,
        text: str,
        model: str,
        dimensions: int | None = None,
    ) -> EmbeddingResult:
        model = model.removeprefix("vertex/")
        self._check_model(model)
        if not text.strip():
            msg = "Text cannot be empty"
            raise ProviderError(msg, code="INVALID_INPUT", provider="vertex")

        token = await self._access_token()
        payload: dict[str, Any] = {
            "instances": [{"content": text, "task_type": "RETRIEVAL_DOCUMENT"}],
        }
        if dimensions is not None:
            payload["parameters"] = {"outputDimensionality": dimensions}

        data = await self._post_json(
            self._endpoint(model),
            payload,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )

        predictions = data.get("predictions") or []
        if not predictions:
            msg = "No embeddings returned from Vertex AI API"
            raise ProviderError(msg, provider="vertex")
        values = (predictions[0].get("embeddings") or {}).get("values")
        if not values:
            msg = "Invalid embedding format returned from Vertex AI API"
            raise ProviderError(msg, provider="vertex")

        # Vertex bills per character and reports no token usage; estimate it.
        return EmbeddingResult(
            vector=values,
            model=f"vertex/{model}",
            usage=EmbeddingUsage(tokens=math.ceil(len(text) / 4)),
        )
