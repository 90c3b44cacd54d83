"""Exceptions raised by the portfolio build pipeline."""

from __future__ import annotations


class CatalogLoadError(Exception):
    """The catalog, locale overrides or site config could not be loaded.

    Fatal to whichever build step needed the data.
    """


class SlugCollisionError(CatalogLoadError):
    """Two or more catalog titles derive the same slug."""

    def __init__(self, collisions: dict[str, list[str]]):
        self.collisions = collisions
        groups = "; ".join(
            f"{slug}: {', '.join(repr(t) for t in titles)}"
            for slug, titles in sorted(collisions.items())
        )
        super().__init__(f"Slug collision in catalog ({groups})")


class InjectionError(Exception):
    """Metadata could not be written into a single image file."""
