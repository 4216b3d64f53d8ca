"""Ядро чат-бота для посетителей сайта.

Содержит:
- config: dataclass-конфиги индексирования, поиска и внешней LLM
- text: очистка текста, обрезка по словам, стоп-слова и ключевые слова
- indexer: построение индекса контента (ключевой профиль каждой страницы)
- sources: загрузка опубликованных страниц из директории
- llm: провайдеры OpenAI и Anthropic за единым интерфейсом submit()
- engine: локальный поиск, сборка ответа с источниками и деградация к нему
- logging_utils: настройка логирования
"""

from .config import ChatConfig, IndexingConfig, LLMConfig, RetrievalConfig
from .engine import ChatEngine, ChatResponse, Source
from .indexer import ContentIndexer, Document, IndexEntry

__all__ = [
    "ChatConfig",
    "IndexingConfig",
    "LLMConfig",
    "RetrievalConfig",
    "ChatEngine",
    "ChatResponse",
    "Source",
    "ContentIndexer",
    "Document",
    "IndexEntry",
]
