from __future__ import annotations


class PolyTokenizerError(Exception):
    """Root exception for the polytokenizer library."""


class ConfigurationError(PolyTokenizerError):
    """Invalid or missing configuration."""


class InvalidModelError(PolyTokenizerError):
    """Model identifier is not in ``provider/model`` form."""


class UnsupportedModelError(PolyTokenizerError):
    """Provider or model does not support the requested capability."""


class InvalidInputError(PolyTokenizerError):
    """Caller-supplied messages or options failed validation."""


class ProviderError(PolyTokenizerError):
    """A vendor tokenization or embedding call failed."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "API_ERROR",
        provider: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ProviderNotAvailableError(ProviderError):
    """Required vendor SDK is not installed."""
