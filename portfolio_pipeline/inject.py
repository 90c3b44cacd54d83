"""Post-render metadata injection.

Scans the rendered asset tree for JPEGs, matches each to its painting by
slug (the filename stem), and stamps EXIF metadata into the file in place.

Architecture:
- Metadata is always written from the canonical (default-language) catalog
- Files with no matching painting are left untouched and not counted
- A failing file is logged and counted as skipped; the batch carries on
- With workers > 1, files are processed on a bounded thread pool
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, Optional

from portfolio_pipeline.catalog import build_slug_lookup
from portfolio_pipeline.exif import inject_metadata
from portfolio_pipeline.models import Artwork, InjectionFailure, InjectionSummary, SiteConfig

logger = logging.getLogger(__name__)

JPEG_PATTERN = "*.jpg"


class _Tally:
    """Thread-safe processed/skipped counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.processed = 0
        self.skipped = 0
        self.failures: list[InjectionFailure] = []

    def ok(self) -> None:
        with self._lock:
            self.processed += 1

    def failed(self, path: Path, reason: str) -> None:
        with self._lock:
            self.skipped += 1
            self.failures.append(InjectionFailure(path=str(path), reason=reason))


def find_jpegs(root: str | Path) -> list[Path]:
    """All rendered ``*.jpg`` files under root, recursively, in stable order."""
    return sorted(p for p in Path(root).rglob(JPEG_PATTERN) if p.is_file())


def _inject_one(
    path: Path,
    artwork: Artwork,
    site: SiteConfig,
    tally: _Tally,
    copyright_year: Optional[int],
) -> None:
    try:
        inject_metadata(path, artwork, site, copyright_year)
    except Exception as e:
        logger.warning("Failed to inject metadata into %s: %s", path, e)
        tally.failed(path, str(e))
    else:
        tally.ok()


def inject_directory(
    root: str | Path,
    artworks: Iterable[Artwork],
    site: SiteConfig,
    workers: int = 1,
    copyright_year: Optional[int] = None,
) -> InjectionSummary:
    """Inject EXIF metadata into every rendered painting JPEG under root.

    Args:
        root: Rendered asset directory (e.g. public/static).
        artworks: Canonical catalog; metadata is never localized.
        site: Site identity for Artist/Copyright/Software.
        workers: Thread pool size; 1 runs sequentially.
        copyright_year: Override the copyright year (defaults to now).

    Returns:
        InjectionSummary with processed/skipped/unmatched counts.

    Raises:
        SlugCollisionError: If the catalog can't be keyed by slug. Raised
            before any file is touched.
    """
    lookup = build_slug_lookup(artworks)

    root_path = Path(root)
    if not root_path.is_dir():
        logger.warning("Rendered asset directory does not exist: %s", root_path)
        return InjectionSummary()

    matched: list[tuple[Path, Artwork]] = []
    unmatched = 0
    for path in find_jpegs(root_path):
        artwork = lookup.get(path.stem)
        if artwork is None:
            unmatched += 1
            continue
        matched.append((path, artwork))

    tally = _Tally()
    if workers > 1 and len(matched) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_inject_one, path, artwork, site, tally, copyright_year)
                for path, artwork in matched
            ]
            for future in as_completed(futures):
                future.result()
    else:
        for path, artwork in matched:
            _inject_one(path, artwork, site, tally, copyright_year)

    summary = InjectionSummary(
        processed=tally.processed,
        skipped=tally.skipped,
        unmatched=unmatched,
        failures=sorted(tally.failures, key=lambda f: f.path),
    )
    logger.info(
        "Injected metadata into %d images (%d skipped)",
        summary.processed, summary.skipped,
    )
    return summary
