"""Build pipeline for the painting portfolio.

Two steps around the external renderer:
pages (catalog → page manifest) → [render] → inject (EXIF into JPEGs).

Entry point: python -m portfolio_pipeline.pipeline {pages,inject,all}
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional

from pydantic import ValidationError

from portfolio_pipeline.catalog import load_catalog, load_overrides, load_site_config
from portfolio_pipeline.config import Settings, get_settings
from portfolio_pipeline.errors import CatalogLoadError
from portfolio_pipeline.inject import inject_directory
from portfolio_pipeline.pages import build_pages, write_page_manifest

logger = logging.getLogger(__name__)


def run_build_pages(settings: Optional[Settings] = None) -> dict:
    """Load the catalog and write the page manifest.

    A load failure aborts the step before anything is written. A failed
    manifest write leaves any previous manifest in place.

    Returns:
        Dict with status, page count and errors.
    """
    settings = settings or get_settings()
    results: dict[str, Any] = {"status": "started", "pages": 0, "errors": []}

    try:
        artworks = load_catalog(settings.catalog_path)
        overrides = load_overrides(settings.locales_path)
        records = build_pages(
            artworks,
            overrides,
            settings.language_config(),
            extension=settings.image_extension,
        )
    except CatalogLoadError as e:
        logger.error("Page generation aborted: %s", e)
        results["status"] = "failed"
        results["errors"].append(f"pages: {e}")
        return results

    try:
        write_page_manifest(records, settings.page_manifest_path)
    except OSError as e:
        logger.error("Page manifest write failed: %s", e)
        results["status"] = "failed"
        results["errors"].append(f"pages: manifest write failed: {e}")
        return results

    results["status"] = "ok"
    results["pages"] = len(records)
    results["manifest"] = str(settings.page_manifest_path)
    return results


def run_inject_metadata(settings: Optional[Settings] = None) -> dict:
    """Stamp EXIF metadata into the rendered JPEGs.

    Per-file failures are counted, not fatal. If the site config or catalog
    can't be loaded, no file is touched and the step fails.

    Returns:
        Dict with status, processed/skipped/unmatched counts and errors.
    """
    settings = settings or get_settings()
    results: dict[str, Any] = {"status": "started", "errors": []}

    try:
        site = load_site_config(settings.site_config_path)
        artworks = load_catalog(settings.catalog_path)
        summary = inject_directory(
            settings.public_path,
            artworks,
            site,
            workers=settings.inject_workers,
        )
    except CatalogLoadError as e:
        logger.error("Metadata injection aborted: %s", e)
        results["status"] = "failed"
        results["errors"].append(f"inject: {e}")
        return results

    results["status"] = "ok"
    results["processed"] = summary.processed
    results["skipped"] = summary.skipped
    results["unmatched"] = summary.unmatched
    results["errors"].extend(f"{f.path}: {f.reason}" for f in summary.failures)
    return results


def run_all(settings: Optional[Settings] = None) -> dict:
    """Run pages then inject. Injection never runs after a failed page step."""
    settings = settings or get_settings()
    results: dict[str, Any] = {"status": "started", "steps": {}}

    pages = run_build_pages(settings)
    results["steps"]["pages"] = pages
    if pages["status"] == "failed":
        results["status"] = "failed"
        return results

    inject = run_inject_metadata(settings)
    results["steps"]["inject"] = inject
    results["status"] = inject["status"]
    return results


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Painting portfolio build pipeline")
    parser.add_argument(
        "step",
        choices=["pages", "inject", "all"],
        help="pages: write page manifest; inject: EXIF into rendered JPEGs; all: both",
    )
    parser.add_argument("--content-dir", help="Override content directory")
    parser.add_argument("--public-dir", help="Override rendered asset directory")
    parser.add_argument("--manifest", help="Override page manifest output path")
    parser.add_argument("--workers", type=int, help="Metadata injector thread count")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for the build pipeline."""
    args = _parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.content_dir:
        overrides["content_dir"] = args.content_dir
    if args.public_dir:
        overrides["public_dir"] = args.public_dir
    if args.manifest:
        overrides["page_manifest"] = args.manifest
    if args.workers is not None:
        overrides["inject_workers"] = args.workers
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        settings = get_settings(**overrides)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    runners = {
        "pages": run_build_pages,
        "inject": run_inject_metadata,
        "all": run_all,
    }
    results = runners[args.step](settings)

    print(f"\nPipeline status: {results['status']}")
    for step, data in results.get("steps", {}).items():
        print(f"  {step}: {data.get('status', 'unknown')}")
    if "processed" in results:
        print(f"  processed: {results['processed']}, skipped: {results['skipped']}")

    errors = list(results.get("errors", []))
    for data in results.get("steps", {}).values():
        errors.extend(data.get("errors", []))
    if errors:
        print(f"\nErrors ({len(errors)}):")
        for err in errors:
            print(f"  - {err}")

    return 0 if results["status"] != "failed" else 1


if __name__ == "__main__":
    sys.exit(main())
