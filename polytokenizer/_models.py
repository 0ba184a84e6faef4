from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class Role(StrEnum):
    """Chat message author role."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TrimStrategy(StrEnum):
    """Which end of the conversation is evicted first."""

    EARLY = "early"
    LATE = "late"


# --- Messages ---


class Message(BaseModel):
    """A single chat message."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    name: str | None = None
    tool_call_id: str | None = None


class ScoredMessage(BaseModel):
    """A message with its measured token cost and original position."""

    model_config = ConfigDict(frozen=True)

    index: int
    message: Message
    token_cost: int


# --- Text splitting ---


class TextFragment(BaseModel):
    """An intermediate piece of text produced while splitting."""

    model_config = ConfigDict(frozen=True)

    text: str
    token_count: int


class SplitTextOptions(BaseModel):
    """Options for :func:`polytokenizer.split_text_max_tokens`."""

    preserve_sentences: bool = True
    preserve_words: bool = True
    overlap: int | None = None


class TrimOptions(BaseModel):
    """Options for :func:`polytokenizer.trim_messages`.

    The overhead defaults follow OpenAI's chat formatting: roughly 4 tokens of
    role/boundary markup per message and 2 tokens priming the reply.
    """

    strategy: TrimStrategy = TrimStrategy.EARLY
    preserve_system: bool = True
    per_message_overhead: int = Field(default=4, ge=0)
    total_overhead: int = Field(default=2, ge=0)


# --- Embeddings ---


class EmbeddingUsage(BaseModel):
    """Token usage reported (or estimated) for one embedding call."""

    tokens: int


class EmbeddingResult(BaseModel):
    """Normalised embedding response from any provider."""

    vector: list[float]
    model: str
    usage: EmbeddingUsage


class ModelRef(BaseModel):
    """A parsed ``provider/model`` identifier."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model_name: str

    def __str__(self) -> str:
        return f"{self.provider}/{self.model_name}"
