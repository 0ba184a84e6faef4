from __future__ import annotations

from polytokenizer.utils._exceptions import PolyTokenizerError


class TextProcessingError(PolyTokenizerError):
    """Base exception for text splitting and message trimming."""


class SegmentationImpossibleError(TextProcessingError):
    """A fragment cannot be brought under the token ceiling by any delimiter."""


class MissingBudgetError(TextProcessingError):
    """``trim_messages`` was called without a positive token budget."""
