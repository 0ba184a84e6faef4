from __future__ import annotations

from polytokenizer.text._exceptions import (
    MissingBudgetError,
    SegmentationImpossibleError,
    TextProcessingError,
)
from polytokenizer.text._splitter import split_max_tokens
from polytokenizer.text._trimmer import (
    preserve_nothing,
    preserve_roles,
    score_messages,
    trim_messages,
)

__all__ = [
    "MissingBudgetError",
    "SegmentationImpossibleError",
    "TextProcessingError",
    "preserve_nothing",
    "preserve_roles",
    "score_messages",
    "split_max_tokens",
    "trim_messages",
]
