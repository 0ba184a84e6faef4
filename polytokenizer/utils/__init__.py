from __future__ import annotations

from polytokenizer.utils._exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvalidModelError,
    PolyTokenizerError,
    ProviderError,
    ProviderNotAvailableError,
    UnsupportedModelError,
)
from polytokenizer.utils._logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "InvalidInputError",
    "InvalidModelError",
    "PolyTokenizerError",
    "ProviderError",
    "ProviderNotAvailableError",
    "UnsupportedModelError",
    "configure_logging",
    "get_logger",
]
