"""EXIF metadata for rendered painting JPEGs.

Builds the tag set describing a painting and splices it into the JPEG byte
stream in place of any existing EXIF (APP1) segment.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import piexif
import piexif.helper
from PIL import ExifTags, Image

from portfolio_pipeline.errors import InjectionError
from portfolio_pipeline.fileio import atomic_write_bytes
from portfolio_pipeline.models import Artwork, LegacyDimensions, SiteConfig, StructuredDimensions

logger = logging.getLogger(__name__)

JPEG_SOI = b"\xff\xd8"


def format_dimensions(dim: StructuredDimensions | LegacyDimensions) -> str:
    """Render measured sizes as "10 × 12 in"; legacy text passes through."""
    return dim.format()


def format_user_comment(artwork: Artwork) -> str:
    """Pipe-joined painting summary stored in the EXIF UserComment."""
    return " | ".join([
        artwork.description,
        f"Medium: {artwork.medium} on {artwork.substrate}",
        f"Size: {format_dimensions(artwork.dimensions)}",
        f"Substrate: {format_dimensions(artwork.substrate_size)}",
        f"Year: {artwork.year}",
    ])


def _ascii(value: str) -> bytes:
    # EXIF ASCII tags are raw bytes; UTF-8 keeps non-Latin names intact
    return value.encode("utf-8")


def build_exif(
    artwork: Artwork,
    site: SiteConfig,
    copyright_year: Optional[int] = None,
) -> dict:
    """Build the piexif tag dict for one painting.

    Args:
        artwork: Canonical (default-language) painting record.
        site: Site identity for attribution.
        copyright_year: Year in the copyright notice. Defaults to the current year.

    Returns:
        Dict with "0th" and "Exif" IFDs, ready for ``piexif.dump``.
    """
    year = copyright_year or datetime.now(timezone.utc).year
    return {
        "0th": {
            piexif.ImageIFD.Artist: _ascii(site.author),
            piexif.ImageIFD.Copyright: _ascii(
                f"© {year} {site.name}. All rights reserved."
            ),
            piexif.ImageIFD.ImageDescription: _ascii(artwork.title),
            piexif.ImageIFD.Software: _ascii(site.name),
        },
        "Exif": {
            piexif.ExifIFD.UserComment: piexif.helper.UserComment.dump(
                format_user_comment(artwork), encoding="unicode"
            ),
            piexif.ExifIFD.DateTimeOriginal: _ascii(f"{artwork.year}:01:01 00:00:00"),
        },
    }


def splice_exif(jpeg: bytes, exif: dict) -> bytes:
    """Return ``jpeg`` with its EXIF segment replaced by ``exif``.

    Raises:
        InjectionError: If the data is not a JPEG or the tags can't be encoded.
    """
    if jpeg[:2] != JPEG_SOI:
        raise InjectionError("not a JPEG (missing SOI marker)")
    try:
        exif_bytes = piexif.dump(exif)
        output = io.BytesIO()
        piexif.insert(exif_bytes, jpeg, output)
    except Exception as e:
        raise InjectionError(f"EXIF encode failed: {e}") from e
    return output.getvalue()


def _read_bytes(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write_bytes(path: Path, data: bytes) -> None:
    atomic_write_bytes(path, data)


def inject_metadata(
    path: str | Path,
    artwork: Artwork,
    site: SiteConfig,
    copyright_year: Optional[int] = None,
) -> None:
    """Rewrite a rendered JPEG in place with the painting's EXIF metadata.

    Raises:
        InjectionError: On any read, encode or write failure.
    """
    path = Path(path)
    try:
        data = _read_bytes(path)
    except OSError as e:
        raise InjectionError(f"read failed: {e}") from e

    new_data = splice_exif(data, build_exif(artwork, site, copyright_year))

    try:
        _write_bytes(path, new_data)
    except OSError as e:
        raise InjectionError(f"write failed: {e}") from e
    if logger.isEnabledFor(logging.DEBUG):
        _log_read_back(path, artwork)


def _text(value):
    """Decode an EXIF value for display."""
    if isinstance(value, bytes):
        return value.rstrip(b"\x00").decode("utf-8", "replace")
    if isinstance(value, str):
        # Pillow reads ASCII tags as latin-1; undo that for UTF-8 payloads
        try:
            return value.encode("latin-1").decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            return value
    return value


def read_exif(path: str | Path) -> dict:
    """Read the IFD0 and Exif sub-IFD tags of an image by tag name.

    UserComment is decoded from its character-code prefix.
    """
    with Image.open(path) as img:
        exif = img.getexif()
        raw = dict(exif.items())
        raw.update(exif.get_ifd(ExifTags.IFD.Exif))

    tags = {}
    for tag_id, value in raw.items():
        name = ExifTags.TAGS.get(tag_id, str(tag_id))
        if name == "UserComment" and isinstance(value, bytes):
            tags[name] = piexif.helper.UserComment.load(value)
        elif name == "ExifOffset":
            continue
        else:
            tags[name] = _text(value)
    return tags


def _log_read_back(path: Path, artwork: Artwork) -> None:
    """Read the tags back with Pillow and log what landed in the file."""
    try:
        tags = read_exif(path)
    except OSError as e:
        logger.warning("Could not read back metadata from %s: %s", path, e)
        return
    description = tags.get("ImageDescription")
    if description != artwork.title:
        logger.warning(
            "Metadata read-back mismatch for %s: ImageDescription=%r",
            path, description,
        )
        return
    logger.debug("Injected metadata into %s (Artist=%s)", path, tags.get("Artist"))
