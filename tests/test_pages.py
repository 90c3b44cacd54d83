"""Tests for the page builder."""

import json

import pytest

from portfolio_pipeline.errors import SlugCollisionError
from portfolio_pipeline.models import LanguageConfig, LocaleOverride, NavItem
from portfolio_pipeline.pages import (
    build_pages,
    build_path,
    navigation,
    sort_gallery,
    write_page_manifest,
)
from portfolio_pipeline.slug import slugify

from conftest import disk_full_open, make_artwork

LANGUAGES = LanguageConfig(languages=("en", "zh", "yue", "ms"), default_language="en")


def test_build_path_default_language():
    assert build_path("en", "/painting/x", "en") == "/painting/x"


def test_build_path_prefixed_languages():
    assert build_path("zh", "/painting/x", "en") == "/zh/painting/x"
    assert build_path("yue", "/painting/x", "en") == "/yue/painting/x"
    assert build_path("ms", "/painting/x", "en") == "/ms/painting/x"


def test_sort_gallery_by_order():
    paintings = [make_artwork("C", order=3), make_artwork("A", order=1), make_artwork("B", order=2)]
    assert [a.title for a in sort_gallery(paintings)] == ["A", "B", "C"]


def test_sort_gallery_is_stable():
    """Equal order values keep catalog order."""
    paintings = [make_artwork("B", order=1), make_artwork("A", order=1)]
    assert [a.title for a in sort_gallery(paintings)] == ["B", "A"]


class TestNavigation:
    paintings = [
        make_artwork("First Painting", order=1),
        make_artwork("Second Painting", order=2),
        make_artwork("Third Painting", order=3),
    ]

    def test_first(self):
        prev, next_ = navigation(self.paintings, 0)
        assert prev is None
        assert next_ == NavItem(id="second-painting", title="Second Painting")

    def test_middle(self):
        prev, next_ = navigation(self.paintings, 1)
        assert prev == NavItem(id="first-painting", title="First Painting")
        assert next_ == NavItem(id="third-painting", title="Third Painting")

    def test_last(self):
        prev, next_ = navigation(self.paintings, 2)
        assert prev == NavItem(id="second-painting", title="Second Painting")
        assert next_ is None

    def test_single(self):
        assert navigation([make_artwork("Only Painting")], 0) == (None, None)

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            navigation(self.paintings, 3)


def test_one_page_per_language_and_painting(artworks):
    pages = build_pages(artworks, {}, LANGUAGES)
    assert len(pages) == len(LANGUAGES.languages) * len(artworks)
    pairs = {(p.language, p.context.id) for p in pages}
    assert len(pairs) == len(pages)


def test_pages_in_language_then_catalog_order(artworks):
    pages = build_pages(artworks, {}, LANGUAGES)
    assert [p.language for p in pages[:3]] == ["en", "en", "en"]
    assert [p.context.artwork.title for p in pages[:3]] == [a.title for a in artworks]


def test_page_paths_and_i18n(artworks):
    pages = build_pages(artworks, {}, LANGUAGES)
    en = next(p for p in pages if p.language == "en" and p.context.id == "red-blue")
    zh = next(p for p in pages if p.language == "zh" and p.context.id == "red-blue")

    assert en.path == "/painting/red-blue"
    assert en.context.i18n.routed is False
    assert zh.path == "/zh/painting/red-blue"
    assert zh.context.i18n.routed is True
    assert zh.context.i18n.original_path == "/painting/red-blue"
    assert zh.context.i18n.languages == ("en", "zh", "yue", "ms")
    assert zh.context.i18n.default_language == "en"
    assert zh.context.image_base_name == "red-blue"
    assert zh.context.artwork.image == "red-blue.jpg"


def test_ids_are_language_independent(artworks):
    overrides = {"zh": [LocaleOverride(title="Morning Lake", description="湖")]}
    pages = build_pages(artworks, overrides, LANGUAGES)
    for artwork in artworks:
        ids = {p.context.artwork.id for p in pages if p.context.artwork.title == artwork.title}
        assert ids == {slugify(artwork.title)}


def test_overrides_applied_per_language(artworks):
    overrides = {
        "zh": [LocaleOverride(title="Morning Lake", description="湖上的薄雾", alt="")],
        "ms": [LocaleOverride(title="Morning Lake", alt="Tasik")],
    }
    pages = {(p.language, p.context.id): p.context.artwork for p in build_pages(artworks, overrides, LANGUAGES)}

    assert pages[("en", "morning-lake")].description == "Morning Lake description"
    assert pages[("zh", "morning-lake")].description == "湖上的薄雾"
    assert pages[("zh", "morning-lake")].alt == "Morning Lake alt"
    assert pages[("ms", "morning-lake")].alt == "Tasik"
    assert pages[("ms", "morning-lake")].description == "Morning Lake description"
    assert pages[("yue", "morning-lake")].description == "Morning Lake description"


def test_unmatched_and_unknown_language_overrides_ignored(artworks):
    overrides = {
        "zh": [LocaleOverride(title="Not In Catalog", description="孤儿")],
        "fr": [LocaleOverride(title="Morning Lake", description="Lac")],
    }
    pages = build_pages(artworks, overrides, LANGUAGES)
    assert len(pages) == 12
    assert all(p.context.artwork.description != "Lac" for p in pages)


def test_pages_carry_gallery_neighbours(artworks):
    """Neighbours follow display order, not catalog order."""
    pages = build_pages(artworks, {}, LANGUAGES)
    by_id = {p.context.id: p.context for p in pages if p.language == "en"}
    assert by_id["red-blue"].prev is None
    assert by_id["red-blue"].next.id == "morning-lake"
    assert by_id["morning-lake"].prev.id == "red-blue"
    assert by_id["morning-lake"].next.id == "quiet-hills"
    assert by_id["quiet-hills"].next is None


def test_custom_language_set(artworks):
    config = LanguageConfig(languages=("zh", "en"), default_language="zh")
    pages = build_pages(artworks, {}, config)
    assert {p.path for p in pages if p.language == "zh"} == {
        "/painting/morning-lake", "/painting/red-blue", "/painting/quiet-hills",
    }
    assert all(p.path.startswith("/en/") for p in pages if p.language == "en")


def test_slug_collision_aborts_page_build():
    with pytest.raises(SlugCollisionError):
        build_pages([make_artwork("Red, Blue"), make_artwork("Red Blue")], {}, LANGUAGES)


def test_write_page_manifest(artworks, tmp_path):
    pages = build_pages(artworks, {}, LANGUAGES)
    path = write_page_manifest(pages, tmp_path / "out" / "paintings.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert len(data["pages"]) == 12
    first = data["pages"][0]
    assert first["path"] == "/painting/morning-lake"
    assert first["context"]["artwork"]["dimensions"] == {
        "kind": "structured", "width": 10.0, "height": 12.0, "unit": "in",
    }
    assert first["context"]["i18n"]["languages"] == ["en", "zh", "yue", "ms"]


def test_failed_manifest_write_keeps_previous(artworks, tmp_path, monkeypatch):
    path = tmp_path / "paintings.json"
    path.write_text('{"pages": []}', encoding="utf-8")
    pages = build_pages(artworks, {}, LANGUAGES)

    monkeypatch.setattr("portfolio_pipeline.fileio.open", disk_full_open(100), raising=False)
    with pytest.raises(OSError):
        write_page_manifest(pages, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {"pages": []}
    assert list(tmp_path.iterdir()) == [path]
