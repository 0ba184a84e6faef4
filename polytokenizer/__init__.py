"""Provider-agnostic token counting, embeddings and token-budgeted text utilities."""

from __future__ import annotations

from polytokenizer._api import (
    count_tokens,
    embed_text,
    estimate_tokens,
    get_token_counter,
    split_text_max_tokens,
    trim_messages,
    try_count_tokens,
)
from polytokenizer._config import LibraryConfig, ProviderConfig, VertexConfig
from polytokenizer._constants import (
    CONTEXT_LIMITS,
    EMBEDDING_DIMENSIONS,
    EMBEDDING_LIMITS,
    EMBEDDING_MODELS,
    TOKENIZATION_MODELS,
)
from polytokenizer._models import (
    EmbeddingResult,
    EmbeddingUsage,
    Message,
    Role,
    SplitTextOptions,
    TrimOptions,
    TrimStrategy,
)
from polytokenizer.providers import configure
from polytokenizer.text import (
    MissingBudgetError,
    SegmentationImpossibleError,
    preserve_nothing,
    preserve_roles,
)
from polytokenizer.utils import (
    ConfigurationError,
    InvalidInputError,
    InvalidModelError,
    PolyTokenizerError,
    ProviderError,
    UnsupportedModelError,
)

__version__ = "1.0.8"

__all__ = [
    "CONTEXT_LIMITS",
    "EMBEDDING_DIMENSIONS",
    "EMBEDDING_LIMITS",
    "EMBEDDING_MODELS",
    "TOKENIZATION_MODELS",
    "ConfigurationError",
    "EmbeddingResult",
    "EmbeddingUsage",
    "InvalidInputError",
    "InvalidModelError",
    "LibraryConfig",
    "Message",
    "MissingBudgetError",
    "PolyTokenizerError",
    "ProviderConfig",
    "ProviderError",
    "Role",
    "SegmentationImpossibleError",
    "SplitTextOptions",
    "TrimOptions",
    "TrimStrategy",
    "UnsupportedModelError",
    "VertexConfig",
    "configure",
    "count_tokens",
    "embed_text",
    "estimate_tokens",
    "get_token_counter",
    "preserve_nothing",
    "preserve_roles",
    "split_text_max_tokens",
    "trim_messages",
    "try_count_tokens",
]
