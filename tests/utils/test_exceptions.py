from __future__ import annotations

import pytest

from polytokenizer.utils._exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvalidModelError,
    PolyTokenizerError,
    ProviderError,
    ProviderNotAvailableError,
    UnsupportedModelError,
)


class TestExceptionHierarchy:
    def test_root_is_exception(self):
        assert issubclass(PolyTokenizerError, Exception)

    @pytest.mark.parametrize(
        "exc_cls",
        [
            ConfigurationError,
            InvalidInputError,
            InvalidModelError,
            UnsupportedModelError,
            ProviderError,
        ],
    )
    def test_subclasses_inherit_root(self, exc_cls):
        assert issubclass(exc_cls, PolyTokenizerError)

    def test_not_available_is_provider_error(self):
        assert issubclass(ProviderNotAvailableError, ProviderError)

    def test_can_raise_and_catch_as_base(self):
        with pytest.raises(PolyTokenizerError):
            raise InvalidModelError("gpt-4o")


class TestProviderError:
    def test_defaults(self):
        err = ProviderError("failed")
        assert str(err) == "failed"
        assert err.code == "API_ERROR"
        assert err.provider == ""
        assert err.status_code is None
        assert err.retryable is False

    @pytest.mark.parametrize(("status", "retryable"), [(429, True), (500, True), (503, True)])
    def test_retryable_statuses(self, status, retryable):
        assert ProviderError("x", status_code=status).retryable is retryable

    @pytest.mark.parametrize("status", [400, 401, 404])
    def test_client_errors_not_retryable(self, status):
        assert ProviderError("x", status_code=status).retryable is False

    def test_fields_preserved(self):
        err = ProviderError("bad key", code="API_KEY_INVALID", provider="openai", status_code=401)
        assert err.code == "API_KEY_INVALID"
        assert err.provider == "openai"
        assert err.status_code == 401
