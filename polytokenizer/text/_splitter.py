"""Token-bounded text splitting.

Oversized text is refined pass by pass at progressively finer boundaries
(paragraphs, then sentences, then words) and the resulting fragments are
packed greedily back into chunks that fit the ceiling.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, NamedTuple

from polytokenizer._models import TextFragment
from polytokenizer.text._exceptions import SegmentationImpossibleError
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from polytokenizer._types import TokenCounter

_log = get_logger(__name__)

CHUNK_SEPARATOR = "\n"


class _Delimiter(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    option: str


# Coarse to fine. ``option`` names the flag that enables each one.
_DELIMITERS: tuple[_Delimiter, ...] = (
    _Delimiter("paragraph", re.compile(r"\n+"), "preserve_sentences"),
    _Delimiter("sentence", re.compile(r"(?<=\w[.?!])\s+"), "preserve_sentences"),
    _Delimiter("word", re.compile(r"\s+"), "preserve_words"),
)


def _enabled_delimiters(*, preserve_sentences: bool, preserve_words: bool) -> list[_Delimiter]:
    flags = {"preserve_sentences": preserve_sentences, "preserve_words": preserve_words}
    return [d for d in _DELIMITERS if flags[d.option]]


async def _measure(texts: list[str], count_tokens: TokenCounter) -> list[TextFragment]:
    """Count every text concurrently and wait for all of them."""
    counts = await asyncio.gather(*(count_tokens(t) for t in texts))
    return [TextFragment(text=t, token_count=c) for t, c in zip(texts, counts, strict=True)]


async def _refine(
    fragments: list[TextFragment],
    delimiter: _Delimiter,
    count_tokens: TokenCounter,
    max_tokens: int,
) -> list[TextFragment]:
    """Split every oversized fragment on *delimiter*; keep the rest as-is."""
    # Each slot is either a fitting fragment or the pieces of an oversized one.
    slots: list[TextFragment | list[str]] = []
    pending: list[str] = []
    for fragment in fragments:
        if fragment.token_count <= max_tokens:
            slots.append(fragment)
            continue
        pieces = [p for p in delimiter.pattern.split(fragment.text) if p]
        slots.append(pieces)
        pending.extend(pieces)

    if not pending:
        return fragments

    measured = iter(await _measure(pending, count_tokens))
    refined: list[TextFragment] = []
    for slot in slots:
        if isinstance(slot, TextFragment):
            refined.append(slot)
        else:
            refined.extend(next(measured) for _ in slot)
    return refined


def _pack(fragments: list[TextFragment], max_tokens: int) -> list[str]:
    """Greedily join consecutive fragments into chunks within *max_tokens*."""
    chunks: list[str] = []
    current: list[str] = []
    current_tokens = 0

    for fragment in fragments:
        if current and current_tokens + fragment.token_count <= max_tokens:
            current.append(fragment.text)
            current_tokens += fragment.token_count
            continue
        if current:
            chunks.append(CHUNK_SEPARATOR.join(current))
        current = [fragment.text]
        current_tokens = fragment.token_count

    if current:
        chunks.append(CHUNK_SEPARATOR.join(current))
    return chunks


async def split_max_tokens(
    text: str,
    count_tokens: TokenCounter,
    max_tokens: int,
    *,
    preserve_sentences: bool = True,
    preserve_words: bool = True,
) -> list[str]:
    """Split *text* into ordered chunks of at most *max_tokens* tokens each.

    Args:
        text: The text to split.
        count_tokens: Awaitable token counter bound to one model.
        max_tokens: Token ceiling per chunk. Non-positive values disable
            splitting and return the text unchanged.
        preserve_sentences: Allow splitting at paragraph and sentence breaks.
        preserve_words: Allow splitting at whitespace.

    Returns:
        The chunks, in source order. Fragments inside a chunk are rejoined
        with a single newline.
        Packing sums the fragments' own counts and does not re-measure the
        joined chunk, so with a tokenizer that charges for the newline a
        chunk can measure slightly above *max_tokens*.

    Raises:
        SegmentationImpossibleError: If some piece is still over the ceiling
            after every enabled delimiter has been applied.
    """
    if not text:
        return []
    if max_tokens <= 0:
        return [text]

    total = await count_tokens(text)
    if total <= max_tokens:
        return [text]

    fragments = [TextFragment(text=text, token_count=total)]
    delimiters = _enabled_delimiters(
        preserve_sentences=preserve_sentences,
        preserve_words=preserve_words,
    )
    for delimiter in delimiters:
        fragments = await _refine(fragments, delimiter, count_tokens, max_tokens)
        _log.debug("split_pass", delimiter=delimiter.name, fragments=len(fragments))

    oversized = [f for f in fragments if f.token_count > max_tokens]
    if oversized:
        msg = (
            f"Failed to split text into chunks of {max_tokens} tokens: "
            f"{len(oversized)} segment(s) are still too large "
            f"(largest has {max(f.token_count for f in oversized)} tokens)"
        )
        raise SegmentationImpossibleError(msg)

    chunks = _pack(fragments, max_tokens)
    _log.debug(
        "split_complete",
        input_tokens=total,
        fragments=len(fragments),
        chunks=len(chunks),
        max_tokens=max_tokens,
    )
    return chunks
