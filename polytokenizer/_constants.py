"""Model tables: context limits, embedding limits and provider capabilities.

Update when vendors add models or change specifications. Sources:

- OpenAI: https://platform.openai.com/docs/models/
- Anthropic: https://docs.anthropic.com/en/docs/about-claude/models
- Gemini: https://ai.google.dev/gemini-api/docs/models
- Vertex AI: https://cloud.google.com/vertex-ai/generative-ai/docs/embeddings
"""

from __future__ import annotations

CONTEXT_LIMITS: dict[str, int] = {
    # OpenAI
    "openai/gpt-4.1": 1_000_000,
    "openai/gpt-4.1-mini": 1_000_000,
    "openai/o4-mini": 200_000,
    "openai/o3": 200_000,
    "openai/o1": 200_000,
    "openai/o1-preview": 128_000,
    "openai/o1-mini": 128_000,
    "openai/gpt-4o": 128_000,
    "openai/gpt-4o-mini": 128_000,
    "openai/gpt-4": 8_192,
    "openai/gpt-4-turbo": 128_000,
    "openai/gpt-3.5-turbo": 16_385,
    # Anthropic
    "anthropic/claude-sonnet-4-5": 200_000,
    "anthropic/claude-haiku-4-5": 200_000,
    "anthropic/claude-opus-4-5": 200_000,
    "anthropic/claude-opus-4-1": 200_000,
    "anthropic/claude-opus-4-0": 200_000,
    "anthropic/claude-sonnet-4-0": 200_000,
    "anthropic/claude-3-7-sonnet-latest": 200_000,
    "anthropic/claude-3-5-sonnet-latest": 200_000,
    "anthropic/claude-3-5-haiku-latest": 200_000,
    "anthropic/claude-3-opus-latest": 200_000,
    # Google
    "google/gemini-2.5-pro": 2_000_000,
    "google/gemini-2.5-flash": 1_000_000,
    "google/gemini-2.0-flash": 1_000_000,
    "google/gemini-1.5-pro": 2_000_000,
    "google/gemini-1.5-flash": 1_000_000,
    "google/gemini-1.5-flash-8b": 1_000_000,
    "google/gemini-pro": 32_768,
}

EMBEDDING_LIMITS: dict[str, int] = {
    "openai/text-embedding-3-small": 8_192,
    "openai/text-embedding-3-large": 8_192,
    "openai/text-embedding-ada-002": 8_192,
    "google/gemini-embedding-exp-03-07": 8_192,
    "google/text-embedding-004": 2_048,
    "google/gemini-embedding-001": 2_048,
    "vertex/text-embedding-005": 2_048,
    "vertex/text-embedding-004": 2_048,
    "vertex/text-multilingual-embedding-002": 2_048,
}

# Default output dimensionality per embedding model.
EMBEDDING_DIMENSIONS: dict[str, int] = {
    "openai/text-embedding-3-small": 1_536,
    "openai/text-embedding-3-large": 3_072,
    "openai/text-embedding-ada-002": 1_536,
    "google/gemini-embedding-exp-03-07": 3_072,
    "google/text-embedding-004": 768,
    "google/gemini-embedding-001": 3_072,
    "vertex/text-embedding-005": 768,
    "vertex/text-embedding-004": 768,
    "vertex/text-multilingual-embedding-002": 768,
}

EMBEDDING_MODELS: tuple[str, ...] = tuple(EMBEDDING_LIMITS)

TOKENIZATION_MODELS: tuple[str, ...] = (
    *CONTEXT_LIMITS,
    "openai/text-embedding-3-small",
    "openai/text-embedding-3-large",
    "openai/text-embedding-ada-002",
    "google/gemini-embedding-exp-03-07",
    "google/text-embedding-004",
    "google/gemini-embedding-001",
)

TOKENIZATION_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "google")
EMBEDDING_PROVIDERS: tuple[str, ...] = ("openai", "google", "vertex")
