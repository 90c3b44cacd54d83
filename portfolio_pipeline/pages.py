"""Page builder for the painting detail pages.

Produces one PageRecord per (language, painting). Pages are generated in
catalog order; ``order`` only drives gallery display and the prev/next links.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from portfolio_pipeline.catalog import build_slug_lookup
from portfolio_pipeline.fileio import atomic_write_text
from portfolio_pipeline.models import (
    Artwork,
    I18nContext,
    LanguageConfig,
    LocaleOverride,
    NavItem,
    PageContext,
    PageRecord,
)
from portfolio_pipeline.overrides import build_override_index, enrich
from portfolio_pipeline.slug import DEFAULT_IMAGE_EXTENSION, image_base_name, slugify

logger = logging.getLogger(__name__)

PAINTING_PATH_PREFIX = "/painting/"


def build_path(language: str, original_path: str, default_language: str) -> str:
    """Prefix non-default languages: ("zh", "/painting/x", "en") -> "/zh/painting/x"."""
    if language == default_language:
        return original_path
    return f"/{language}{original_path}"


def sort_gallery(artworks: Iterable[Artwork]) -> list[Artwork]:
    """Sort by display order; ties keep catalog order."""
    return sorted(artworks, key=lambda a: a.order)


def _nav_item(artwork: Artwork) -> NavItem:
    return NavItem(id=slugify(artwork.title), title=artwork.title)


def navigation(
    sequence: Sequence[Artwork],
    index: int,
) -> tuple[Optional[NavItem], Optional[NavItem]]:
    """Return the (prev, next) neighbours of ``sequence[index]``.

    Raises:
        IndexError: If index is outside the sequence.
    """
    if not 0 <= index < len(sequence):
        raise IndexError(f"index {index} out of range for {len(sequence)} paintings")
    prev = _nav_item(sequence[index - 1]) if index > 0 else None
    next_ = _nav_item(sequence[index + 1]) if index < len(sequence) - 1 else None
    return prev, next_


def build_pages(
    artworks: Iterable[Artwork],
    overrides_by_language: Mapping[str, Iterable[LocaleOverride]],
    languages: LanguageConfig,
    extension: str = DEFAULT_IMAGE_EXTENSION,
) -> list[PageRecord]:
    """Build every painting page for every supported language.

    Overrides for languages outside ``languages`` are ignored, as are
    overrides whose title matches no painting.

    Raises:
        SlugCollisionError: If two catalog titles derive the same id.
    """
    artworks = list(artworks)
    build_slug_lookup(artworks)

    gallery = sort_gallery(artworks)
    neighbours = {
        slugify(artwork.title): navigation(gallery, index)
        for index, artwork in enumerate(gallery)
    }

    records = []
    for language in languages.languages:
        override_index = build_override_index(overrides_by_language.get(language))

        for artwork in artworks:
            enriched = enrich(artwork, override_index.get(slugify(artwork.title)), extension)
            original_path = f"{PAINTING_PATH_PREFIX}{enriched.id}"
            i18n = I18nContext(
                language=language,
                languages=languages.languages,
                default_language=languages.default_language,
                original_path=original_path,
                routed=languages.is_routed(language),
            )
            prev, next_ = neighbours[enriched.id]
            records.append(PageRecord(
                path=build_path(language, original_path, languages.default_language),
                language=language,
                context=PageContext(
                    id=enriched.id,
                    artwork=enriched,
                    image_base_name=image_base_name(enriched.image),
                    i18n=i18n,
                    prev=prev,
                    next=next_,
                ),
            ))

        logger.debug("Built %d %s pages", len(artworks), language)

    logger.info(
        "Built %d painting pages across %d languages",
        len(records), len(languages.languages),
    )
    return records


def write_page_manifest(records: Sequence[PageRecord], path: str | Path) -> Path:
    """Write the page records as JSON for the renderer.

    The manifest is replaced atomically, so a failed write keeps the previous
    one (or none) rather than a partial page set.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"pages": [record.model_dump(mode="json") for record in records]}
    atomic_write_text(path, json.dumps(payload, ensure_ascii=False, indent=2))
    logger.info("Wrote %d page records to %s", len(records), path)
    return path
