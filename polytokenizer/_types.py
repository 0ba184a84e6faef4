from __future__ import annotations

from collections.abc import Awaitable, Callable

from polytokenizer._models import Message

TokenCounter = Callable[[str], Awaitable[int]]
"""Awaitable ``count(text) -> int`` bound to a single model."""

RetentionPolicy = Callable[[Message], bool]
"""Predicate selecting messages that trimming must never evict."""
