from __future__ import annotations

from polytokenizer.providers._anthropic import AnthropicProvider
from polytokenizer.providers._base import EmbeddingProvider, TokenizerProvider
from polytokenizer.providers._google import GoogleProvider
from polytokenizer.providers._openai import OpenAIProvider, encoding_name_for_model
from polytokenizer.providers._registry import (
    KNOWN_PROVIDERS,
    aclose_providers,
    clear_provider_cache,
    configure,
    create_provider,
    get_config,
    get_embedding_provider,
    get_tokenizer_provider,
    parse_model,
)
from polytokenizer.providers._vertex import VertexAIProvider

__all__ = [
    "KNOWN_PROVIDERS",
    "AnthropicProvider",
    "EmbeddingProvider",
    "GoogleProvider",
    "OpenAIProvider",
    "TokenizerProvider",
    "VertexAIProvider",
    "aclose_providers",
    "clear_provider_cache",
    "configure",
    "create_provider",
    "encoding_name_for_model",
    "get_config",
    "get_embedding_provider",
    "get_tokenizer_provider",
    "parse_model",
]
