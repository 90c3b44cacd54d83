"""Portfolio pipeline configuration module.

Loads build settings from environment variables with type validation using
pydantic-settings. Fails fast with clear error messages on bad values.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_pipeline.models import LanguageConfig


class Settings(BaseSettings):
    """Build settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Content sources ──
    content_dir: str = Field(
        default="content",
        description="Directory holding paintings/ and site/ YAML sources",
    )

    # ── Rendered output ──
    public_dir: str = Field(
        default="public/static",
        description="Rendered asset root scanned for JPEGs after the build",
    )
    page_manifest: str = Field(
        default="public/page-data/paintings.json",
        description="Where the page records for the renderer are written",
    )
    image_extension: str = Field(
        default=".jpg",
        description="Extension the asset pipeline gives processed paintings",
    )

    # ── i18n ──
    languages: list[str] = Field(
        default_factory=lambda: ["en", "zh", "yue", "ms"],
        description="Supported language codes, in display order",
    )
    default_language: str = Field(
        default="en",
        description="Language served without a path prefix",
    )

    # ── General ──
    inject_workers: int = Field(
        default=1,
        description="Worker threads used by the metadata injector",
        ge=1,
        le=32,
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got '{v}'")
        return upper

    @field_validator("image_extension")
    @classmethod
    def validate_image_extension(cls, v: str) -> str:
        """Normalize the extension to a leading dot."""
        v = v.strip()
        if not v or v == ".":
            raise ValueError("image_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @model_validator(mode="after")
    def validate_languages(self) -> "Settings":
        """Languages must be a non-empty set containing the default."""
        if not self.languages:
            raise ValueError("languages must not be empty")
        if len(set(self.languages)) != len(self.languages):
            raise ValueError(f"languages must be unique, got {self.languages}")
        if self.default_language not in self.languages:
            raise ValueError(
                f"default_language '{self.default_language}' is not one of {self.languages}"
            )
        return self

    def language_config(self) -> LanguageConfig:
        """Return the immutable language configuration for the pipeline."""
        return LanguageConfig(
            languages=tuple(self.languages),
            default_language=self.default_language,
        )

    @property
    def content_path(self) -> Path:
        return Path(self.content_dir)

    @property
    def catalog_path(self) -> Path:
        """Base (canonical-language) paintings catalog."""
        return self.content_path / "paintings" / "paintings.yaml"

    @property
    def locales_path(self) -> Path:
        """Directory of per-language override files."""
        return self.content_path / "paintings" / "locales"

    @property
    def site_config_path(self) -> Path:
        return self.content_path / "site" / "site.yaml"

    @property
    def public_path(self) -> Path:
        return Path(self.public_dir)

    @property
    def page_manifest_path(self) -> Path:
        return Path(self.page_manifest)


def get_settings(**overrides) -> Settings:
    """Create a Settings instance with optional overrides.

    Args:
        **overrides: Key-value pairs to override env/defaults.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If any value fails validation.
    """
    return Settings(**overrides)
