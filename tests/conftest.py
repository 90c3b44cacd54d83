"""Shared fixtures for the portfolio pipeline tests."""

import builtins
from pathlib import Path

import pytest
import yaml
from PIL import Image

from portfolio_pipeline.models import Artwork, SiteConfig


def make_artwork(title: str, order: int = 1, **fields) -> Artwork:
    data = {
        "title": title,
        "description": f"{title} description",
        "dimensions": {"width": 10, "height": 12, "unit": "in"},
        "substrate": "canvas",
        "substrateSize": {"width": 12, "height": 14, "unit": "in"},
        "medium": "oil",
        "year": "2024",
        "alt": f"{title} alt",
        "order": order,
    }
    data.update(fields)
    return Artwork.model_validate(data)


def make_jpeg(path: Path, size=(64, 48), color=(120, 80, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path, "JPEG")
    return path


def disk_full_open(limit: int = 100):
    """An ``open`` whose write handles store ``limit`` bytes, then fail with ENOSPC."""
    real_open = builtins.open

    class _PartialWriter:
        def __init__(self, f):
            self._f = f

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self._f.close()
            return False

        def write(self, data):
            self._f.write(data[:limit])
            self._f.flush()
            raise OSError(28, "No space left on device")

    def fake_open(file, mode="r", *args, **kwargs):
        f = real_open(file, mode, *args, **kwargs)
        return _PartialWriter(f) if "w" in mode else f

    return fake_open


@pytest.fixture
def site():
    return SiteConfig(name="lulutracy", author="Lulu Tracy", email="hi@example.com", url="https://example.com")


@pytest.fixture
def artworks():
    return [
        make_artwork("Morning Lake", order=2),
        make_artwork("Red, Blue", order=1),
        make_artwork("Quiet Hills", order=3),
    ]


@pytest.fixture
def content_dir(tmp_path):
    """A content tree with a catalog, two locale files and a site config."""
    root = tmp_path / "content"
    (root / "paintings" / "locales").mkdir(parents=True)
    (root / "site").mkdir(parents=True)

    catalog = {
        "paintings": [
            {
                "title": "Morning Lake",
                "description": "Mist over the lake",
                "dimensions": {"width": 10, "height": 12, "unit": "in"},
                "substrate": "paper",
                "substrateSize": {"width": 12, "height": 14, "unit": "in"},
                "medium": "watercolor",
                "year": 2023,
                "alt": "A misty lake",
                "order": 2,
            },
            {
                "title": "Red, Blue",
                "description": "Two colours",
                "dimensions": "20 x 30 cm",
                "substrate": "canvas",
                "substrateSize": "25 x 35 cm",
                "medium": "acrylic",
                "year": "2024",
                "alt": "Red and blue fields",
                "order": 1,
            },
        ]
    }
    zh = {
        "locale": "zh",
        "paintings": [
            {"title": "Morning Lake", "description": "湖上的薄雾", "alt": ""},
            {"title": "Not In Catalog", "description": "孤儿"},
        ],
    }
    ms = {
        "locale": "ms",
        "paintings": [{"title": "Red, Blue", "alt": "Merah dan biru"}],
    }
    site_yaml = {
        "site": {
            "name": "lulutracy",
            "author": "Lulu Tracy",
            "email": "hi@example.com",
            "url": "https://example.com",
            "tagline": "ignored",
        }
    }

    def dump(path, data):
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")

    dump(root / "paintings" / "paintings.yaml", catalog)
    dump(root / "paintings" / "locales" / "zh.yaml", zh)
    dump(root / "paintings" / "locales" / "ms.yaml", ms)
    dump(root / "site" / "site.yaml", site_yaml)
    return root
