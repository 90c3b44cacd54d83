"""Catalog loading for the portfolio build.

Reads the canonical paintings catalog, per-language override files and the
site config from YAML, validates them into models, and builds the slug
lookup every later join goes through.

Expected layout under the content directory:
    paintings/
        paintings.yaml      ← base catalog (default language)
        locales/
            zh.yaml         ← {locale: zh, paintings: [{title, description, alt}]}
    site/
        site.yaml           ← {site: {name, author, email, url}}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from portfolio_pipeline.errors import CatalogLoadError, SlugCollisionError
from portfolio_pipeline.models import Artwork, LocaleOverride, SiteConfig
from portfolio_pipeline.slug import slugify

logger = logging.getLogger(__name__)

LOCALE_SUFFIXES = {".yaml", ".yml"}


def _read_yaml(path: Path) -> Any:
    """Parse a YAML file, wrapping I/O and syntax errors."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise CatalogLoadError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"Invalid YAML in {path}: {e}") from e


def _records(data: Any, key: str, path: Path) -> list:
    """Pull the record list stored under ``key`` in a YAML mapping."""
    if not isinstance(data, dict) or key not in data:
        raise CatalogLoadError(f"{path} has no top-level '{key}' list")
    records = data[key] or []
    if not isinstance(records, list):
        raise CatalogLoadError(f"'{key}' in {path} must be a list")
    return records


def load_catalog(path: str | Path) -> list[Artwork]:
    """Load the base paintings catalog, preserving file order.

    Raises:
        CatalogLoadError: If the file is missing, malformed or any entry
            fails validation.
    """
    path = Path(path)
    artworks = []
    for index, raw in enumerate(_records(_read_yaml(path), "paintings", path)):
        try:
            artworks.append(Artwork.model_validate(raw))
        except ValidationError as e:
            title = raw.get("title") if isinstance(raw, dict) else None
            raise CatalogLoadError(
                f"Invalid painting #{index} ({title!r}) in {path}: {e}"
            ) from e
    logger.debug("Loaded %d paintings from %s", len(artworks), path)
    return artworks


def load_locale_file(path: str | Path) -> tuple[str, list[LocaleOverride]]:
    """Load one override file. The language is its ``locale`` key, else the file stem."""
    path = Path(path)
    data = _read_yaml(path)
    records = _records(data, "paintings", path)
    language = str(data.get("locale") or path.stem)
    try:
        overrides = [LocaleOverride.model_validate(raw) for raw in records]
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid override in {path}: {e}") from e
    return language, overrides


def load_overrides(locales_dir: str | Path) -> dict[str, list[LocaleOverride]]:
    """Load every override file in a directory, keyed by language.

    A missing directory means no translations yet, not an error.
    """
    locales_dir = Path(locales_dir)
    if not locales_dir.is_dir():
        logger.debug("No locale overrides at %s", locales_dir)
        return {}

    overrides: dict[str, list[LocaleOverride]] = {}
    for path in sorted(locales_dir.iterdir()):
        if path.suffix.lower() not in LOCALE_SUFFIXES or not path.is_file():
            continue
        language, records = load_locale_file(path)
        overrides.setdefault(language, []).extend(records)
        logger.debug("Loaded %d %s overrides from %s", len(records), language, path.name)
    return overrides


def load_site_config(path: str | Path) -> SiteConfig:
    """Load site identity from ``site.yaml`` (either nested under ``site:`` or flat)."""
    path = Path(path)
    data = _read_yaml(path)
    if isinstance(data, dict) and isinstance(data.get("site"), dict):
        data = data["site"]
    if not isinstance(data, dict):
        raise CatalogLoadError(f"{path} does not contain a site mapping")
    try:
        return SiteConfig.model_validate(data)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid site config in {path}: {e}") from e


def find_slug_collisions(artworks: Iterable[Artwork]) -> dict[str, list[str]]:
    """Group titles by slug and return only the slugs shared by several entries."""
    by_slug: dict[str, list[str]] = {}
    for artwork in artworks:
        try:
            slug = slugify(artwork.title)
        except ValueError as e:
            raise CatalogLoadError(str(e)) from e
        by_slug.setdefault(slug, []).append(artwork.title)
    return {slug: titles for slug, titles in by_slug.items() if len(titles) > 1}


def build_slug_lookup(artworks: Iterable[Artwork]) -> dict[str, Artwork]:
    """Map slug -> artwork for the whole catalog.

    Raises:
        SlugCollisionError: If two entries (duplicate or distinct titles)
            derive the same slug.
    """
    artworks = list(artworks)
    collisions = find_slug_collisions(artworks)
    if collisions:
        raise SlugCollisionError(collisions)
    return {slugify(a.title): a for a in artworks}
