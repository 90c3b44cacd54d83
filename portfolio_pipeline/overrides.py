"""Locale override merging.

Only ``description`` and ``alt`` are translatable. An empty or missing
override field falls back to the base catalog text.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from portfolio_pipeline.models import Artwork, EnrichedArtwork, LocaleOverride
from portfolio_pipeline.slug import DEFAULT_IMAGE_EXTENSION, image_filename, slugify

logger = logging.getLogger(__name__)


def build_override_index(
    overrides: Optional[Iterable[LocaleOverride]],
) -> dict[str, LocaleOverride]:
    """Index one language's overrides by the slug of their title.

    Later entries win over earlier ones with the same slug.
    """
    index: dict[str, LocaleOverride] = {}
    for override in overrides or ():
        try:
            index[slugify(override.title)] = override
        except ValueError:
            logger.debug("Dropping override with unusable title %r", override.title)
    return index


def merge(base: Artwork, override: Optional[LocaleOverride]) -> dict:
    """Return the base artwork's fields with translatable text overridden."""
    fields = base.model_dump()
    if override is None:
        return fields
    if override.description:
        fields["description"] = override.description
    if override.alt:
        fields["alt"] = override.alt
    return fields


def enrich(
    base: Artwork,
    override: Optional[LocaleOverride] = None,
    extension: str = DEFAULT_IMAGE_EXTENSION,
) -> EnrichedArtwork:
    """Merge overrides and attach the language-independent id and image name."""
    fields = merge(base, override)
    fields["id"] = slugify(base.title)
    fields["image"] = image_filename(base.title, extension)
    return EnrichedArtwork.model_validate(fields)
