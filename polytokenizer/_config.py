"""Library configuration: per-provider credentials and endpoints.

Configuration comes from three places, later ones winning:

1. ``configs/polytokenizer.yaml`` (or an explicit path),
2. :func:`polytokenizer.configure` calls,
3. for API keys only, the vendor's usual environment variable when the
   configured key is empty.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from polytokenizer.utils._exceptions import ConfigurationError
from polytokenizer.utils._logging import get_logger

_log = get_logger(__name__)

_DEFAULT_CONFIG_PATH = Path("configs/polytokenizer.yaml")

API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GEMINI_API_KEY",
}


class ProviderConfig(BaseModel):
    """Credentials and transport settings for one API-key provider."""

    api_key: str = ""
    base_url: str = ""
    timeout_seconds: int = 60
    max_retries: int = Field(default=3, ge=1)


class VertexConfig(BaseModel):
    """Vertex AI project and service-account credentials."""

    project_id: str
    location: str = "us-central1"
    credentials: dict[str, Any] = Field(default_factory=dict)
    timeout_seconds: int = 60
    max_retries: int = Field(default=3, ge=1)


class LibraryConfig(BaseModel):
    """Root model that mirrors ``configs/polytokenizer.yaml``."""

    openai: ProviderConfig | None = None
    anthropic: ProviderConfig | None = None
    google: ProviderConfig | None = None
    vertex: VertexConfig | None = None

    def merged(self, other: LibraryConfig) -> LibraryConfig:
        """Return a copy where every section set in *other* replaces ours."""
        update = {name: section for name, section in other if section is not None}
        return self.model_copy(update=update)

    def provider(self, name: str) -> ProviderConfig:
        """Config for an API-key provider, with the env-var key fallback applied."""
        section = getattr(self, name, None)
        cfg = section if isinstance(section, ProviderConfig) else ProviderConfig()
        if cfg.api_key:
            return cfg

        env_var = API_KEY_ENV_VARS.get(name)
        api_key = os.environ.get(env_var, "") if env_var else ""
        if not api_key:
            msg = (
                f"API key not found for provider {name}. "
                f"Set {env_var} environment variable or call configure()."
            )
            raise ConfigurationError(msg)
        return cfg.model_copy(update={"api_key": api_key})

    def vertex_settings(self) -> VertexConfig:
        if self.vertex is None or not self.vertex.project_id:
            msg = "Vertex AI configuration missing. Set project_id in configure() call."
            raise ConfigurationError(msg)
        return self.vertex


def load_library_config(config_path: Path | None = None) -> LibraryConfig:
    """Load and validate the library config from a YAML file.

    Args:
        config_path: Path to the YAML config. Defaults to
            ``configs/polytokenizer.yaml``; a missing default file yields an
            empty config.

    Returns:
        Validated LibraryConfig model.

    Raises:
        ConfigurationError: If an explicit file is missing, or any file is
            unreadable or invalid.
    """
    path = config_path or _DEFAULT_CONFIG_PATH

    if not path.exists():
        if config_path is None:
            _log.debug("library_config_not_found", path=str(path))
            return LibraryConfig()
        msg = f"Config file not found: {path}"
        raise ConfigurationError(msg)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigurationError(msg) from exc

    if data is None:
        return LibraryConfig()
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path}, got {type(data).__name__}"
        raise ConfigurationError(msg)

    try:
        return LibraryConfig.model_validate(data)
    except Exception as exc:
        msg = f"Config validation failed for {path}: {exc}"
        raise ConfigurationError(msg) from exc
