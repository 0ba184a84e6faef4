"""Token-budgeted chat history trimming."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from polytokenizer._models import Message, Role, ScoredMessage, TrimStrategy
from polytokenizer.text._exceptions import MissingBudgetError
from polytokenizer.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from polytokenizer._types import RetentionPolicy, TokenCounter

_log = get_logger(__name__)

DEFAULT_PER_MESSAGE_OVERHEAD = 4
DEFAULT_TOTAL_OVERHEAD = 2


# --- Retention policies ---


def preserve_roles(*roles: Role | str) -> RetentionPolicy:
    """Build a policy that never evicts messages with one of *roles*."""
    wanted = frozenset(Role(r) for r in roles)

    def _policy(message: Message) -> bool:
        return message.role in wanted

    return _policy


def preserve_nothing(message: Message) -> bool:  # noqa: ARG001
    """Policy under which every message may be evicted."""
    return False


# --- Selection ---


def _select_run(
    evictable: list[ScoredMessage],
    available: int,
    strategy: TrimStrategy,
) -> list[ScoredMessage]:
    """Take the longest contiguous run from one end that fits *available*.

    ``EARLY`` evicts the oldest messages, so the run is taken from the end;
    ``LATE`` evicts the newest, so it is taken from the start.
    """
    ordered = reversed(evictable) if strategy is TrimStrategy.EARLY else iter(evictable)
    selected: list[ScoredMessage] = []
    used = 0
    for scored in ordered:
        if used + scored.token_cost > available:
            break
        selected.append(scored)
        used += scored.token_cost
    return selected


async def score_messages(
    messages: Sequence[Message],
    count_tokens: TokenCounter,
    per_message_overhead: int = DEFAULT_PER_MESSAGE_OVERHEAD,
) -> list[ScoredMessage]:
    """Measure every message concurrently, adding the per-message overhead."""
    counts = await asyncio.gather(*(count_tokens(m.content) for m in messages))
    return [
        ScoredMessage(index=i, message=m, token_cost=c + per_message_overhead)
        for i, (m, c) in enumerate(zip(messages, counts, strict=True))
    ]


async def trim_messages(
    messages: Sequence[Message],
    count_tokens: TokenCounter,
    max_tokens: int,
    *,
    strategy: TrimStrategy | str = TrimStrategy.EARLY,
    preserve_system: bool = True,
    per_message_overhead: int = DEFAULT_PER_MESSAGE_OVERHEAD,
    total_overhead: int = DEFAULT_TOTAL_OVERHEAD,
    retention: RetentionPolicy | None = None,
) -> list[Message]:
    """Drop whole messages until the conversation fits *max_tokens*.

    Messages matched by the retention policy are always kept. The remaining
    messages are kept as one contiguous run from the end chosen by
    *strategy*. The result preserves the input order.

    Args:
        messages: The conversation, oldest first.
        count_tokens: Awaitable token counter bound to one model.
        max_tokens: Total token budget, including overheads.
        strategy: ``"early"`` drops the oldest messages first, ``"late"``
            drops the newest first.
        preserve_system: Keep every system message. Ignored when
            *retention* is given.
        per_message_overhead: Tokens added to each message's content count.
        total_overhead: Tokens added once for the whole conversation.
        retention: Custom predicate selecting messages that must be kept.

    Raises:
        MissingBudgetError: If *max_tokens* is missing or not positive.
    """
    if not max_tokens or max_tokens <= 0:
        msg = "Must specify a positive max_tokens"
        raise MissingBudgetError(msg)

    if not messages:
        return []

    strategy = TrimStrategy(strategy)
    if retention is None:
        retention = preserve_roles(Role.SYSTEM) if preserve_system else preserve_nothing

    scored = await score_messages(messages, count_tokens, per_message_overhead)
    total = sum(s.token_cost for s in scored) + total_overhead
    if total <= max_tokens:
        return list(messages)

    preserved = [s for s in scored if retention(s.message)]
    evictable = [s for s in scored if not retention(s.message)]
    preserved_tokens = sum(s.token_cost for s in preserved)

    available = max_tokens - preserved_tokens - total_overhead
    if available <= 0:
        _log.warning(
            "trim_budget_exhausted",
            max_tokens=max_tokens,
            preserved_tokens=preserved_tokens,
            kept=len(preserved),
        )
        return [s.message for s in preserved]

    selected = _select_run(evictable, available, strategy)
    kept = sorted([*preserved, *selected], key=lambda s: s.index)

    _log.debug(
        "trim_complete",
        strategy=strategy.value,
        input_tokens=total,
        max_tokens=max_tokens,
        kept=len(kept),
        evicted=len(scored) - len(kept),
    )
    return [s.message for s in kept]
