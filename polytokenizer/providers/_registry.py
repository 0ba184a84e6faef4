"""Model-id parsing and the lazily built, cached provider instances.

Usage::

    from polytokenizer.providers import get_tokenizer_provider, parse_model

    ref = parse_model("openai/gpt-4o")
    provider = get_tokenizer_provider(ref.provider)
    n = await provider.count_tokens(ref.model_name, "Hello world")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from polytokenizer._config import LibraryConfig, load_library_config
from polytokenizer._constants import EMBEDDING_PROVIDERS, TOKENIZATION_PROVIDERS
from polytokenizer._models import ModelRef
from polytokenizer.providers._anthropic import AnthropicProvider
from polytokenizer.providers._google import GoogleProvider
from polytokenizer.providers._openai import OpenAIProvider
from polytokenizer.providers._vertex import VertexAIProvider
from polytokenizer.utils._exceptions import (
    ConfigurationError,
    InvalidModelError,
    UnsupportedModelError,
)
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from polytokenizer.providers._base import EmbeddingProvider, TokenizerProvider

_log = get_logger(__name__)

KNOWN_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "google", "vertex")

Provider = OpenAIProvider | AnthropicProvider | GoogleProvider | VertexAIProvider

_config_cache: LibraryConfig | None = None
_provider_cache: dict[str, Provider] = {}


def parse_model(model: str) -> ModelRef:
    """Split ``provider/model`` into its parts.

    Raises:
        InvalidModelError: If *model* has no provider prefix.
    """
    provider, sep, model_name = model.partition("/")
    if not sep or not provider or not model_name:
        msg = f"Invalid model format: {model}. Expected format: provider/model"
        raise InvalidModelError(msg)
    return ModelRef(provider=provider, model_name=model_name)


# ── Config ─────────────────────────────────────────────────────────────


def get_config() -> LibraryConfig:
    """Current library config, loading ``configs/polytokenizer.yaml`` on first use."""
    global _config_cache
    if _config_cache is None:
        _config_cache = load_library_config()
    return _config_cache


def configure(
    config: LibraryConfig | dict | None = None,
    *,
    config_path: Path | None = None,
) -> None:
    """Merge new settings into the library config and drop cached providers.

    Args:
        config: Sections to set, as a model or a plain mapping.
        config_path: YAML file to merge in before *config*.
    """
    global _config_cache
    merged = get_config()
    if config_path is not None:
        merged = merged.merged(load_library_config(config_path))
    if config is not None:
        if not isinstance(config, LibraryConfig):
            try:
                config = LibraryConfig.model_validate(config)
            except ValidationError as exc:
                msg = f"Invalid configuration: {exc}"
                raise ConfigurationError(msg) from exc
        merged = merged.merged(config)
    _config_cache = merged
    _provider_cache.clear()
    _log.debug("library_configured", sections=[k for k, v in merged if v is not None])


# ── Factory ────────────────────────────────────────────────────────────


def create_provider(name: str, config: LibraryConfig) -> Provider:
    """Build a provider instance from *config*.

    Raises:
        ConfigurationError: If credentials are missing.
        UnsupportedModelError: If *name* is not a known provider.
    """
    if name == "vertex":
        vertex = config.vertex_settings()
        return VertexAIProvider(
            project_id=vertex.project_id,
            location=vertex.location,
            credentials=vertex.credentials,
            timeout_seconds=vertex.timeout_seconds,
            max_retries=vertex.max_retries,
        )

    if name not in KNOWN_PROVIDERS:
        msg = f"Unsupported provider: {name}"
        raise UnsupportedModelError(msg)

    cfg = config.provider(name)
    if name == "openai":
        return OpenAIProvider(
            api_key=cfg.api_key,
            base_url=cfg.base_url or "https://api.openai.com",
            timeout_seconds=cfg.timeout_seconds,
            max_retries=cfg.max_retries,
        )
    if name == "anthropic":
        return AnthropicProvider(
            api_key=cfg.api_key,
            base_url=cfg.base_url,
            timeout_seconds=cfg.timeout_seconds,
            max_retries=cfg.max_retries,
        )
    return GoogleProvider(
        api_key=cfg.api_key,
        base_url=cfg.base_url or "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds=cfg.timeout_seconds,
        max_retries=cfg.max_retries,
    )


def _get_provider(name: str) -> Provider:
    if name not in _provider_cache:
        _provider_cache[name] = create_provider(name, get_config())
        _log.info("provider_created", provider=name)
    return _provider_cache[name]


def get_tokenizer_provider(name: str) -> TokenizerProvider:
    """Cached provider that can count tokens."""
    if name not in KNOWN_PROVIDERS:
        msg = f"Unsupported provider: {name}"
        raise UnsupportedModelError(msg)
    if name not in TOKENIZATION_PROVIDERS:
        msg = f"Provider {name} does not support tokenization"
        raise UnsupportedModelError(msg)
    return cast("TokenizerProvider", _get_provider(name))


def get_embedding_provider(name: str) -> EmbeddingProvider:
    """Cached provider that can embed text."""
    if name not in KNOWN_PROVIDERS:
        msg = f"Unsupported provider: {name}"
        raise UnsupportedModelError(msg)
    if name not in EMBEDDING_PROVIDERS:
        msg = f"Provider {name} does not support embeddings"
        raise UnsupportedModelError(msg)
    return cast("EmbeddingProvider", _get_provider(name))


async def aclose_providers() -> None:
    """Close HTTP clients held by cached providers and empty the cache."""
    for provider in list(_provider_cache.values()):
        await provider.aclose()
    _provider_cache.clear()


def clear_provider_cache() -> None:
    """Reset cached config and providers.  Useful for testing."""
    global _config_cache
    _provider_cache.clear()
    _config_cache = None
