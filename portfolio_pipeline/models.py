"""Portfolio pipeline Pydantic models.

Records flowing through the build: the canonical catalog, per-language
overrides, the enriched page records handed to the renderer, and the
injector's batch summary. Catalog-derived records are frozen once built.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _format_number(value: float) -> str:
    """Render 10.0 as "10" and 10.5 as "10.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class StructuredDimensions(BaseModel):
    """Measured width × height in a single unit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: Literal["cm", "in", "mm"]

    def format(self) -> str:
        return f"{_format_number(self.width)} × {_format_number(self.height)} {self.unit}"


class LegacyDimensions(BaseModel):
    """Free-text dimensions from older catalog entries."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["legacy"] = "legacy"
    text: str

    def format(self) -> str:
        return self.text


Dimensions = Annotated[
    Union[StructuredDimensions, LegacyDimensions],
    Field(discriminator="kind"),
]


def _coerce_dimensions(value):
    """Tag raw YAML dimensions with their variant."""
    if isinstance(value, str):
        return {"kind": "legacy", "text": value}
    if isinstance(value, dict) and "kind" not in value:
        return {"kind": "structured", **value}
    return value


class Artwork(BaseModel):
    """A painting from the canonical (default-language) catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str = ""
    dimensions: Dimensions
    substrate: str = ""
    substrate_size: Dimensions = Field(..., alias="substrateSize")
    medium: str = ""
    year: str
    alt: str = ""
    order: int = 0

    @field_validator("dimensions", "substrate_size", mode="before")
    @classmethod
    def tag_dimensions(cls, v):
        return _coerce_dimensions(v)

    @field_validator("year", mode="before")
    @classmethod
    def year_as_string(cls, v):
        """YAML reads 2024 as an int; the catalog treats years as text."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class LocaleOverride(BaseModel):
    """Translated description/alt for one painting in one language.

    Structural fields (dimensions, medium, year, order) are not translatable;
    any present in an override file are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    description: Optional[str] = None
    alt: Optional[str] = None


class EnrichedArtwork(Artwork):
    """An artwork with overrides applied and derived id/image fields."""

    id: str
    image: str


class SiteConfig(BaseModel):
    """Site-wide identity used for EXIF attribution."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    author: str
    email: str = ""
    url: str = ""


class LanguageConfig(BaseModel):
    """Supported languages and the unprefixed default."""

    model_config = ConfigDict(frozen=True)

    languages: tuple[str, ...]
    default_language: str

    @model_validator(mode="after")
    def validate_languages(self) -> "LanguageConfig":
        """Ensure the language set is non-empty, unique and holds the default."""
        if not self.languages:
            raise ValueError("languages must not be empty")
        if len(set(self.languages)) != len(self.languages):
            raise ValueError(f"languages must be unique, got {self.languages}")
        if self.default_language not in self.languages:
            raise ValueError(
                f"default_language '{self.default_language}' is not one of {self.languages}"
            )
        return self

    def is_routed(self, language: str) -> bool:
        """Non-default languages are served under a /<lang> prefix."""
        return language != self.default_language


class I18nContext(BaseModel):
    """Per-page i18n descriptor consumed by the renderer."""

    model_config = ConfigDict(frozen=True)

    language: str
    languages: tuple[str, ...]
    default_language: str
    original_path: str
    routed: bool


class NavItem(BaseModel):
    """A gallery neighbour, reduced to what the nav links need."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str


class PageContext(BaseModel):
    """Everything the painting template receives for one page."""

    model_config = ConfigDict(frozen=True)

    id: str
    artwork: EnrichedArtwork
    image_base_name: str
    i18n: I18nContext
    prev: Optional[NavItem] = None
    next: Optional[NavItem] = None


class PageRecord(BaseModel):
    """One output page per (language, artwork) pair."""

    model_config = ConfigDict(frozen=True)

    path: str
    language: str
    context: PageContext


class InjectionFailure(BaseModel):
    """A file the injector could not rewrite."""

    path: str
    reason: str


class InjectionSummary(BaseModel):
    """Outcome of a metadata injection batch.

    ``processed`` and ``skipped`` only count files matched to an artwork;
    ``unmatched`` files are left untouched.
    """

    processed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    unmatched: int = Field(default=0, ge=0)
    failures: list[InjectionFailure] = Field(default_factory=list)

    @property
    def matched(self) -> int:
        return self.processed + self.skipped
