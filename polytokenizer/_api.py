"""Public, model-addressed entry points.

Every function takes a ``provider/model`` identifier, resolves the cached
provider for it and delegates. The splitting and trimming helpers bind the
model into a token counter and hand it to :mod:`polytokenizer.text`.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from polytokenizer._constants import EMBEDDING_MODELS
from polytokenizer._models import (
    EmbeddingResult,
    Message,
    SplitTextOptions,
    TrimOptions,
)
from polytokenizer.providers._registry import (
    get_embedding_provider,
    get_tokenizer_provider,
    parse_model,
)
from polytokenizer.text._splitter import split_max_tokens
from polytokenizer.text._trimmer import trim_messages as _trim_messages
from polytokenizer.utils._exceptions import InvalidInputError, UnsupportedModelError
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from polytokenizer._types import RetentionPolicy, TokenCounter

_log = get_logger(__name__)

CHARS_PER_TOKEN = 4

_M = TypeVar("_M", bound=BaseModel)


def _validate(model_cls: type[_M], value: Any, what: str) -> _M:
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except ValidationError as exc:
        msg = f"Invalid {what}: {exc}"
        raise InvalidInputError(msg) from exc


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


async def count_tokens(model: str, text: str) -> int:
    """Count the tokens *text* costs under *model*.

    Raises:
        InvalidModelError: If *model* is not ``provider/model``.
        UnsupportedModelError: If the provider cannot count tokens.
        ConfigurationError: If the provider's credentials are missing.
        ProviderError: If the vendor call fails.
    """
    ref = parse_model(model)
    provider = get_tokenizer_provider(ref.provider)
    return await provider.count_tokens(ref.model_name, text)


async def try_count_tokens(model: str, text: str) -> int:
    """Like :func:`count_tokens`, but falls back to :func:`estimate_tokens` on any error."""
    try:
        return await count_tokens(model, text)
    except Exception as exc:
        preview = f"{text[:100]}..." if len(text) > 100 else text
        _log.warning(
            "count_tokens_fallback",
            model=model,
            error=str(exc),
            text_length=len(text),
            text_preview=preview,
        )
        return estimate_tokens(text)


def get_token_counter(model: str) -> TokenCounter:
    """Bind *model* into the ``count(text)`` callable the text utilities take.

    The model id is validated up front; credentials are resolved on the
    first call.
    """
    parse_model(model)

    async def _count(text: str) -> int:
        return await count_tokens(model, text)

    return _count


async def embed_text(model: str, text: str, dimensions: int | None = None) -> EmbeddingResult:
    """Embed *text* with an embedding *model*.

    Raises:
        InvalidModelError: If *model* is not ``provider/model``.
        UnsupportedModelError: If *model* is not an embedding model.
        ConfigurationError: If the provider's credentials are missing.
        ProviderError: If the vendor call fails.
    """
    ref = parse_model(model)
    if model not in EMBEDDING_MODELS:
        msg = f"Model {model} does not support embedding functionality"
        raise UnsupportedModelError(msg)

    provider = get_embedding_provider(ref.provider)
    return await provider.embed(text, ref.model_name, dimensions)


async def split_text_max_tokens(
    text: str,
    model: str,
    max_tokens: int,
    options: SplitTextOptions | Mapping[str, Any] | None = None,
) -> list[str]:
    """Split *text* into chunks of at most *max_tokens* tokens under *model*.

    Raises:
        InvalidInputError: If *options* fails validation.
        SegmentationImpossibleError: If the text cannot be brought under the ceiling.
    """
    options = _validate(SplitTextOptions, options or {}, "split options")
    if options.overlap:
        _log.debug("split_overlap_ignored", overlap=options.overlap)

    return await split_max_tokens(
        text,
        get_token_counter(model),
        max_tokens,
        preserve_sentences=options.preserve_sentences,
        preserve_words=options.preserve_words,
    )


async def trim_messages(
    messages: Sequence[Message | Mapping[str, Any]],
    model: str,
    max_tokens: int,
    options: TrimOptions | Mapping[str, Any] | None = None,
    *,
    retention: RetentionPolicy | None = None,
) -> list[Message]:
    """Drop whole messages until the conversation fits *max_tokens* under *model*.

    Raises:
        InvalidInputError: If a message or *options* fails validation.
        MissingBudgetError: If *max_tokens* is not positive.
    """
    options = _validate(TrimOptions, options or {}, "trim options")
    parsed = [_validate(Message, m, f"message at index {i}") for i, m in enumerate(messages)]

    return await _trim_messages(
        parsed,
        get_token_counter(model),
        max_tokens,
        strategy=options.strategy,
        preserve_system=options.preserve_system,
        per_message_overhead=options.per_message_overhead,
        total_overhead=options.total_overhead,
        retention=retention,
    )
