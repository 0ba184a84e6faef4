from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from polytokenizer.providers import OpenAIProvider, encoding_name_for_model
from polytokenizer.utils import ProviderError


def _response(status: int = 200, body: dict[str, Any] | None = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body or {}
    resp.text = text
    return resp


def _embedding_body(vector: list[float] | None = None, tokens: int = 3) -> dict[str, Any]:
    return {
        "data": [{"embedding": vector or [0.1, 0.2, 0.3]}],
        "usage": {"prompt_tokens": tokens},
    }


@pytest.fixture()
def provider() -> OpenAIProvider:
    p = OpenAIProvider(api_key="sk-test", max_retries=1)
    p._async_client = AsyncMock()
    return p


class TestEncodingSelection:
    @pytest.mark.parametrize(
        ("model", "encoding"),
        [
            ("gpt-4o", "o200k_base"),
            ("gpt-4o-mini", "o200k_base"),
            ("gpt-4.1", "o200k_base"),
            ("o1-preview", "o200k_base"),
            ("o3", "o200k_base"),
            ("gpt-4", "cl100k_base"),
            ("gpt-4-turbo", "cl100k_base"),
            ("gpt-3.5-turbo", "cl100k_base"),
            ("text-embedding-3-small", "cl100k_base"),
            (None, "cl100k_base"),
            ("davinci", "gpt2"),
        ],
    )
    def test_family_mapping(self, model, encoding):
        assert encoding_name_for_model(model) == encoding


class TestCountTokens:
    async def test_empty_text_is_zero(self, provider):
        with patch("polytokenizer.providers._openai.tiktoken.get_encoding") as get_enc:
            assert await provider.count_tokens("gpt-4o", "") == 0
        get_enc.assert_not_called()

    async def test_counts_encoded_tokens(self, provider):
        encoding = MagicMock()
        encoding.encode.return_value = [1, 2, 3, 4]
        with patch(
            "polytokenizer.providers._openai.tiktoken.get_encoding", return_value=encoding
        ) as get_enc:
            assert await provider.count_tokens("gpt-4o", "Hello world") == 4
        get_enc.assert_called_once_with("o200k_base")
        encoding.encode.assert_called_once_with("Hello world", disallowed_special=())

    async def test_encoding_cached_per_name(self, provider):
        encoding = MagicMock()
        encoding.encode.return_value = [1]
        with patch(
            "polytokenizer.providers._openai.tiktoken.get_encoding", return_value=encoding
        ) as get_enc:
            await provider.count_tokens("gpt-4o", "a")
            await provider.count_tokens("gpt-4o-mini", "b")
        get_enc.assert_called_once()

    async def test_get_tokenizer_binds_model(self, provider):
        encoding = MagicMock()
        encoding.encode.return_value = [1, 2]
        with patch(
            "polytokenizer.providers._openai.tiktoken.get_encoding", return_value=encoding
        ):
            count = provider.get_tokenizer("gpt-4")
            assert await count("hi there") == 2


class TestEmbed:
    async def test_success(self, provider):
        provider._async_client.post.return_value = _response(body=_embedding_body(tokens=7))

        result = await provider.embed("Hello", "text-embedding-3-small")

        assert result.vector == [0.1, 0.2, 0.3]
        assert result.model == "openai/text-embedding-3-small"
        assert result.usage.tokens == 7
        call = provider._async_client.post.call_args
        assert call.args[0] == "https://api.openai.com/v1/embeddings"
        assert call.kwargs["json"] == {"model": "text-embedding-3-small", "input": "Hello"}
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"

    async def test_dimensions_forwarded(self, provider):
        provider._async_client.post.return_value = _response(body=_embedding_body())
        await provider.embed("Hello", "text-embedding-3-large", dimensions=256)
        assert provider._async_client.post.call_args.kwargs["json"]["dimensions"] == 256

    async def test_base_url_with_v1_suffix(self):
        p = OpenAIProvider(api_key="k", base_url="https://proxy.example/v1/", max_retries=1)
        p._async_client = AsyncMock()
        p._async_client.post.return_value = _response(body=_embedding_body())
        await p.embed("x", "text-embedding-ada-002")
        assert p._async_client.post.call_args.args[0] == "https://proxy.example/v1/embeddings"

    async def test_unsupported_model(self, provider):
        with pytest.raises(ProviderError, match="not supported for embeddings") as exc_info:
            await provider.embed("Hello", "gpt-4o")
        assert exc_info.value.code == "INVALID_MODEL"
        provider._async_client.post.assert_not_awaited()

    async def test_missing_embedding(self, provider):
        provider._async_client.post.return_value = _response(body={"data": []})
        with pytest.raises(ProviderError, match="No embedding returned"):
            await provider.embed("Hello", "text-embedding-3-small")

    async def test_http_error_maps_status(self, provider):
        provider._async_client.post.return_value = _response(status=401, text="invalid key")
        with pytest.raises(ProviderError, match="HTTP 401") as exc_info:
            await provider.embed("Hello", "text-embedding-3-small")
        err = exc_info.value
        assert err.code == "API_KEY_INVALID"
        assert err.status_code == 401
        assert err.provider == "openai"

    async def test_client_error_not_retried(self):
        p = OpenAIProvider(api_key="k", max_retries=3)
        p._async_client = AsyncMock()
        p._async_client.post.return_value = _response(status=400, text="bad request")
        with pytest.raises(ProviderError):
            await p.embed("Hello", "text-embedding-3-small")
        assert p._async_client.post.await_count == 1

    async def test_rate_limit_retried(self):
        p = OpenAIProvider(api_key="k", max_retries=2)
        p._async_client = AsyncMock()
        p._async_client.post.side_effect = [
            _response(status=429, text="slow down"),
            _response(body=_embedding_body()),
        ]
        result = await p.embed("Hello", "text-embedding-3-small")
        assert result.vector == [0.1, 0.2, 0.3]
        assert p._async_client.post.await_count == 2

    async def test_transport_error_wrapped(self, provider):
        provider._async_client.post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(ProviderError, match="openai request failed"):
            await provider.embed("Hello", "text-embedding-3-small")


class TestLifecycle:
    async def test_aclose_releases_client(self, provider):
        client = provider._async_client
        await provider.aclose()
        client.aclose.assert_awaited_once()
        assert provider._async_client is None

    async def test_ensure_async_creates_httpx_client(self):
        p = OpenAIProvider(api_key="k")
        p._ensure_async()
        assert isinstance(p._async_client, httpx.AsyncClient)
        await p.aclose()
