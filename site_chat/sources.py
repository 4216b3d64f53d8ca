#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Источник контента: читает опубликованные страницы сайта из директории."""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from .indexer import Document

logger = logging.getLogger(__name__)

SUPPORTED_EXTS = (".html", ".htm", ".md", ".txt")
HTML_EXTS = (".html", ".htm")

_MD_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}(?:[ \t]+|$)", re.M)


class DirectoryDocumentSource:
    """Загружает документы из каталога вида <data_dir>/<type>/<slug>.<ext>.

    - type: первая поддиректория (page, post, ...); файлы в корне считаются page
    - title: <title>, затем первый <h1>, затем первая строка, затем имя файла
    - url: относительный путь без расширения ("index" даёт URL каталога)
    """
    def __init__(self, data_dir: str, post_types: Optional[Sequence[str]] = None, max_documents: Optional[int] = None) -> None:
        self.data_dir = Path(data_dir)
        self.post_types = tuple(post_types) if post_types else ()
        self.max_documents = max_documents

    def __call__(self) -> List[Document]:
        return self.load()

    def load(self) -> List[Document]:
        if not self.data_dir.exists():
            raise FileNotFoundError(f"Data dir not found: {self.data_dir}")

        docs: List[Document] = []
        for path in sorted(self.data_dir.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTS:
                continue
            doc = self._read(path)
            if self.post_types and doc.type not in self.post_types:
                continue
            docs.append(doc)
            if self.max_documents is not None and len(docs) >= self.max_documents:
                break
        logger.info("Loaded %d documents from %s", len(docs), self.data_dir)
        return docs

    def _read(self, path: Path) -> Document:
        rel = path.relative_to(self.data_dir)
        raw = path.read_text(encoding="utf-8", errors="ignore")
        doc_type = rel.parts[0] if len(rel.parts) > 1 else "page"
        body = _MD_HEADING_RE.sub("", raw) if path.suffix.lower() == ".md" else raw
        return Document(
            id=rel.as_posix(),
            title=_guess_title(raw, path),
            url=_make_url(rel),
            body=body,
            type=doc_type,
        )


def _guess_title(raw: str, path: Path) -> str:
    if path.suffix.lower() in HTML_EXTS:
        soup = BeautifulSoup(raw, "html.parser")
        for tag in (soup.title, soup.h1):
            if tag is not None and tag.get_text(strip=True):
                return tag.get_text(strip=True)
        return path.stem
    for line in raw.splitlines():
        line = line.strip().lstrip("#").strip()
        if line:
            return line[:120]
    return path.stem


def _make_url(rel: Path) -> str:
    parts = list(rel.with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    return "/" + "/".join(parts)
