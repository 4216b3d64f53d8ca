#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class IndexingConfig:
    """Параметры построения индекса контента сайта.

    - content_max_chars: максимальная длина нормализованного текста записи
    - keyword_limit: размер ключевого профиля документа
    - min_word_length: минимальная длина значимого слова
    - post_types: какие типы контента попадают в индекс
    - max_documents: верхняя граница числа документов в индексе
    - index_path: путь к JSON-снимку индекса (опционально)
    """
    content_max_chars: int = 1500
    keyword_limit: int = 20
    min_word_length: int = 3
    post_types: Tuple[str, ...] = ("page", "post")
    max_documents: int = 200
    index_path: Optional[str] = None


@dataclass
class RetrievalConfig:
    """Параметры поиска и сборки ответа.

    - max_sentences: сколько релевантных предложений брать в выдержку
    - max_sources: сколько источников отдавать в UI
    - excerpt_max_chars: длина запасной выдержки, если предложений не нашлось
    - context_top_n: сколько записей отправлять во внешнюю LLM как контекст
    - history_limit: сколько последних сообщений истории передавать
    """
    max_sentences: int = 3
    max_sources: int = 3
    excerpt_max_chars: int = 300
    context_top_n: int = 3
    history_limit: int = 10


@dataclass
class LLMConfig:
    """Параметры внешнего провайдера (OpenAI или Anthropic).

    - mode: local | openai | anthropic
    - api_key: ключ доступа; без него работает только локальный режим
    - temperature, max_tokens, timeout: параметры генерации и сети
    - bot_name, site_name: подставляются в системный промпт
    """
    mode: str = "local"
    api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    anthropic_base_url: str = "https://api.anthropic.com"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 30.0
    bot_name: str = "Site Assistant"
    site_name: str = "our website"


@dataclass
class ChatConfig:
    """Полная конфигурация чат-бота: индекс, поиск, LLM и каталог контента."""
    indexing: IndexingConfig = field(default_factory=IndexingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    data_dir: str = "./data/site"

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Собирает конфигурацию из переменных окружения SITE_CHAT_*."""
        indexing = IndexingConfig(
            content_max_chars=int(os.getenv("SITE_CHAT_CONTENT_MAX_CHARS", "1500")),
            keyword_limit=int(os.getenv("SITE_CHAT_KEYWORD_LIMIT", "20")),
            min_word_length=int(os.getenv("SITE_CHAT_MIN_WORD_LENGTH", "3")),
            post_types=_split_csv(os.getenv("SITE_CHAT_POST_TYPES", "page,post")),
            max_documents=int(os.getenv("SITE_CHAT_MAX_DOCUMENTS", "200")),
            index_path=os.getenv("SITE_CHAT_INDEX_PATH") or None,
        )
        retrieval = RetrievalConfig(
            max_sentences=int(os.getenv("SITE_CHAT_MAX_SENTENCES", "3")),
            max_sources=int(os.getenv("SITE_CHAT_MAX_SOURCES", "3")),
            excerpt_max_chars=int(os.getenv("SITE_CHAT_EXCERPT_MAX_CHARS", "300")),
            context_top_n=int(os.getenv("SITE_CHAT_CONTEXT_TOP_N", "3")),
            history_limit=int(os.getenv("SITE_CHAT_HISTORY_LIMIT", "10")),
        )
        llm = LLMConfig(
            mode=os.getenv("SITE_CHAT_MODE", "local").strip().lower(),
            api_key=os.getenv("SITE_CHAT_API_KEY") or None,
            timeout=float(os.getenv("SITE_CHAT_TIMEOUT", "30")),
            bot_name=os.getenv("SITE_CHAT_BOT_NAME", "Site Assistant"),
            site_name=os.getenv("SITE_CHAT_SITE_NAME", "our website"),
        )
        if os.getenv("SITE_CHAT_MODEL"):
            llm.openai_model = llm.anthropic_model = os.environ["SITE_CHAT_MODEL"]
        return cls(
            indexing=indexing,
            retrieval=retrieval,
            llm=llm,
            data_dir=os.getenv("SITE_CHAT_DATA_DIR", "./data/site"),
        )


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())
