"""Slug and asset-name derivation.

The page builder and the metadata injector both join artworks to rendered
files through these names, so they must stay in step with the asset
pipeline's output naming.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

DEFAULT_IMAGE_EXTENSION = ".jpg"

# Anything that isn't a letter or digit, underscores included
_NON_ALNUM = re.compile(r"[\W_]+")


def slugify(title: str) -> str:
    """Derive a URL- and filename-safe identifier from a title.

    "Red, Blue" -> "red-blue". Distinct titles may share a slug; collisions
    are caught when the catalog lookup is built, not here.

    Raises:
        ValueError: If the title has no letters or digits to build a slug from.
    """
    slug = _NON_ALNUM.sub("-", title.lower()).strip("-")
    if not slug:
        raise ValueError(f"Cannot derive a slug from title {title!r}")
    return slug


def image_filename(title: str, extension: str = DEFAULT_IMAGE_EXTENSION) -> str:
    """Conventional image filename for a painting title."""
    if not extension.startswith("."):
        extension = f".{extension}"
    return f"{slugify(title)}{extension}"


def image_base_name(filename: str) -> str:
    """Strip the final extension: "red-blue.jpg" -> "red-blue"."""
    return PurePosixPath(filename).stem
