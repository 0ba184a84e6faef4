from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from polytokenizer.providers import clear_provider_cache

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_cache(tmp_path: Path):
    """Reset cached config and providers; never read the repo's config file."""
    clear_provider_cache()
    with patch("polytokenizer._config._DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml"):
        yield
    clear_provider_cache()


async def word_count(text: str) -> int:
    """Token counter stub: one token per whitespace-separated word."""
    return len(text.split())


@pytest.fixture()
def word_counter():
    return word_count
