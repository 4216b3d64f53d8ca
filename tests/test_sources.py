"""
Тесты загрузки страниц сайта из директории.

Запуск тестов:
  pytest -q tests/test_sources.py
"""

from pathlib import Path

import pytest

from site_chat.sources import DirectoryDocumentSource


def _site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "page").mkdir(parents=True)
    (root / "post").mkdir()
    (root / "attachment").mkdir()
    (root / "index.html").write_text("<html><head><title>Home</title></head><body>Welcome!</body></html>")
    (root / "page" / "about.html").write_text("<h1>About Us</h1><p>We bake bread.</p>")
    (root / "post" / "hello.md").write_text("\n# Hello World\n\nFirst post.")
    (root / "attachment" / "logo.txt").write_text("logo")
    (root / "page" / "notes.json").write_text("{}")
    return root


def test_load_reads_supported_files_in_path_order(tmp_path: Path) -> None:
    docs = DirectoryDocumentSource(str(_site(tmp_path))).load()
    assert [d.id for d in docs] == ["attachment/logo.txt", "index.html", "page/about.html", "post/hello.md"]


def test_load_derives_title_url_and_type(tmp_path: Path) -> None:
    docs = {d.id: d for d in DirectoryDocumentSource(str(_site(tmp_path))).load()}

    home = docs["index.html"]
    assert (home.title, home.url, home.type) == ("Home", "/", "page")

    about = docs["page/about.html"]
    assert (about.title, about.url, about.type) == ("About Us", "/page/about", "page")
    assert "<p>We bake bread.</p>" in about.body

    post = docs["post/hello.md"]
    assert (post.title, post.url, post.type) == ("Hello World", "/post/hello", "post")


def test_markdown_heading_markers_are_stripped_from_body(tmp_path: Path) -> None:
    root = tmp_path / "site"
    (root / "post").mkdir(parents=True)
    (root / "post" / "menu.md").write_text("# Menu\n\n## Breads\nSourdough daily.\n   ### Cakes\nCarrot cake.\nTag #1 stays.")
    (root / "notes.txt").write_text("# not markdown")

    docs = {d.id: d for d in DirectoryDocumentSource(str(root)).load()}
    post = docs["post/menu.md"]
    assert post.title == "Menu"
    assert post.body == "Menu\n\nBreads\nSourdough daily.\nCakes\nCarrot cake.\nTag #1 stays."
    assert docs["notes.txt"].body == "# not markdown"

def test_load_filters_types_and_limits_count(tmp_path: Path) -> None:
    root = _site(tmp_path)
    docs = DirectoryDocumentSource(str(root), post_types=["page", "post"]).load()
    assert "attachment/logo.txt" not in [d.id for d in docs]

    docs = DirectoryDocumentSource(str(root), post_types=["page", "post"], max_documents=2).load()
    assert [d.id for d in docs] == ["index.html", "page/about.html"]


def test_source_is_callable_as_document_loader(tmp_path: Path) -> None:
    source = DirectoryDocumentSource(str(_site(tmp_path)), post_types=["post"])
    assert [d.title for d in source()] == ["Hello World"]


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        DirectoryDocumentSource(str(tmp_path / "missing")).load()
