#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import IndexingConfig
from .text import clean_text, extract_keywords, truncate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """Опубликованная страница сайта в том виде, в котором её отдаёт источник контента."""
    id: str
    title: str
    url: str
    body: str
    type: str = "page"


@dataclass(frozen=True)
class IndexEntry:
    """Запись индекса: нормализованный текст и ключевой профиль одного документа."""
    id: str
    title: str
    url: str
    content: str
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    type: str = "page"


Index = Tuple[IndexEntry, ...]
DocumentLoader = Callable[[], Iterable[Document]]


def dump_index(index: Index) -> str:
    """Сериализует индекс в детерминированный JSON."""
    payload = [asdict(entry) for entry in index]
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=1)


def load_index(raw: str) -> Index:
    payload = json.loads(raw)
    return tuple(
        IndexEntry(
            id=str(item["id"]),
            title=item["title"],
            url=item["url"],
            content=item["content"],
            keywords=tuple(item.get("keywords", ())),
            type=item.get("type", "page"),
        )
        for item in payload
    )


class ContentIndexer:
    """Индексатор контента сайта.

    1) Принимает документы от источника контента (сам никуда не ходит)
    2) Чистит текст, обрезает его и строит ключевой профиль
    3) Атомарно подменяет текущий индекс новым (copy-on-write)
    """
    def __init__(self, cfg: IndexingConfig, document_loader: Optional[DocumentLoader] = None) -> None:
        self.cfg = cfg
        self._document_loader = document_loader
        self._index: Optional[Index] = None
        self._lock = threading.Lock()

    def _make_entry(self, doc: Document) -> IndexEntry:
        content = clean_text(doc.body)
        title = clean_text(doc.title)
        keywords = extract_keywords(
            f"{title} {content}",
            limit=self.cfg.keyword_limit,
            min_length=self.cfg.min_word_length,
        )
        return IndexEntry(
            id=str(doc.id),
            title=doc.title,
            url=doc.url,
            content=truncate(content, self.cfg.content_max_chars),
            keywords=tuple(keywords),
            type=doc.type,
        )

    def _select(self, documents: Iterable[Document], post_types: Optional[Sequence[str]] = None) -> List[Document]:
        """Фильтрует документы по типу и ограничивает их число."""
        allowed = set(post_types if post_types is not None else self.cfg.post_types)
        selected = [d for d in documents if not allowed or d.type in allowed]
        return selected[: self.cfg.max_documents]

    def build_index(self, documents: Iterable[Document], post_types: Optional[Sequence[str]] = None) -> Index:
        """Строит индекс заново и делает его текущим.

        Предыдущий индекс полностью заменяется, слияния нет.
        post_types переопределяет фильтр типов из конфигурации для этой перестройки.
        """
        with self._lock:
            return self._rebuild(documents, post_types)

    def _rebuild(self, documents: Iterable[Document], post_types: Optional[Sequence[str]] = None) -> Index:
        index: Index = tuple(self._make_entry(d) for d in self._select(documents, post_types))
        self._index = index
        if self.cfg.index_path:
            self._save_snapshot(index)
        logger.info("Content index rebuilt: %d entries", len(index))
        return index

    def get_index(self) -> Index:
        """Возвращает текущий индекс; если его нет, загружает снимок или строит заново."""
        index = self._index
        if index:
            return index
        with self._lock:
            if self._index:
                return self._index
            snapshot = self._load_snapshot()
            if snapshot:
                self._index = snapshot
                return snapshot
            try:
                documents = list(self._document_loader()) if self._document_loader else []
            except OSError:
                # пустой индекс: следующий вызов снова попробует собрать документы
                logger.exception("Document source failed, serving an empty index")
                return ()
            return self._rebuild(documents)

    def _save_snapshot(self, index: Index) -> None:
        path = Path(self.cfg.index_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dump_index(index), encoding="utf-8")
        except OSError as exc:
            # индекс в памяти уже подменён и продолжает обслуживать запросы
            logger.warning("Cannot write index snapshot %s: %s", path, exc)

    def _load_snapshot(self) -> Optional[Index]:
        if not self.cfg.index_path:
            return None
        path = Path(self.cfg.index_path)
        if not path.exists():
            return None
        try:
            return load_index(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Index snapshot %s is unreadable (%s), rebuilding", path, exc)
            return None

    def invalidate(self) -> None:
        """Сбрасывает индекс; следующий get_index() перестроит его целиком."""
        with self._lock:
            self._index = None
            if self.cfg.index_path:
                try:
                    Path(self.cfg.index_path).unlink(missing_ok=True)
                except OSError as exc:
                    logger.warning("Cannot remove index snapshot %s: %s", self.cfg.index_path, exc)
