"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (SEARCHTANK_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServiceSettings(BaseModel):
    """Hosted search service connection."""

    api_url: str = Field(
        default="http://localhost:8080",
        description="Private API URL, credentials may be embedded as userinfo",
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")


class IndexSettings(BaseModel):
    """Index naming and lifecycle behavior."""

    default_name: str | None = Field(
        default=None,
        description="Index name used when a model declaration does not name one",
    )
    ready_poll_interval: float = Field(default=0.5, gt=0, description="Seconds between readiness polls")
    ready_timeout: float = Field(default=300.0, gt=0, description="Give up waiting for a new index after this many seconds")
    batch_size: int = Field(default=200, ge=1, description="Records pushed per bulk call when reindexing")


class SearchSettings(BaseModel):
    """Search behavior configuration."""

    per_page: int = Field(default=10, ge=1, description="Results per page when the model does not define one")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")

    @field_validator("log_format")
    @classmethod
    def _check_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError(f"Unsupported log format: {v}")
        return v


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the SEARCHTANK_ prefix.
    Nested settings use double underscores: SEARCHTANK_SERVICE__API_URL=...

    Example:
        SEARCHTANK_SERVICE__API_URL=http://:secret@example.api.indextank.com
        SEARCHTANK_INDEX__DEFAULT_NAME=myapp_production
        SEARCHTANK_SEARCH__PER_PAGE=20
    """

    model_config = {
        "env_prefix": "SEARCHTANK_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Keys present in the YAML file override environment variables; keys it
        omits still fall back to the environment and then to defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
