#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import LLMConfig, RetrievalConfig
from .indexer import ContentIndexer, Index, IndexEntry
from .llm import CompletionProvider, ProviderResult
from .text import ELLIPSIS, extract_query_keywords, split_sentences

logger = logging.getLogger(__name__)

FALLBACK_MESSAGES: Tuple[str, ...] = (
    "I'm not sure I have information about that. Could you rephrase your question, "
    "or ask about something specific on our site?",
    "I couldn't find a clear answer for that on our website. Try asking about our services, "
    "products, or any specific page topic!",
    "Hmm, I don't have a great answer for that one. You can also reach out to us directly "
    "through our contact page for more help.",
)

TITLE_WEIGHT = 5
CONTENT_WEIGHT = 2
KEYWORD_WEIGHT = 3


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class Source:
    title: str
    url: str


@dataclass
class ChatResponse:
    """Ответ бота: текст, до max_sources источников и режим, который его дал."""
    answer: str
    sources: List[Source] = field(default_factory=list)
    mode: str = "local"

    def to_dict(self) -> Dict[str, object]:
        return {
            "answer": self.answer,
            "sources": [{"title": s.title, "url": s.url} for s in self.sources],
        }


def score_match(query_keywords: Iterable[str], entry: IndexEntry) -> int:
    """Аддитивный скор: +5 за вхождение в заголовок, +2 в текст, +3 за слово из профиля."""
    title = entry.title.lower()
    content = entry.content.lower()
    score = 0
    for qk in query_keywords:
        if qk in title:
            score += TITLE_WEIGHT
        if qk in content:
            score += CONTENT_WEIGHT
        if qk in entry.keywords:
            score += KEYWORD_WEIGHT
    return score


def rank_entries(query_keywords: Sequence[str], index: Index) -> List[Tuple[IndexEntry, int]]:
    """Оставляет записи с ненулевым скором и сортирует их по убыванию (стабильно)."""
    scored = [(entry, score_match(query_keywords, entry)) for entry in index]
    scored = [item for item in scored if item[1] > 0]
    # sorted() стабилен: при равном скоре сохраняется порядок индекса
    return sorted(scored, key=lambda item: item[1], reverse=True)


def trim_history(history: Optional[Iterable[object]], limit: int = 10) -> List[ChatMessage]:
    """Нормализует историю диалога и оставляет последние limit сообщений."""
    clean: List[ChatMessage] = []
    for msg in history or []:
        if isinstance(msg, ChatMessage):
            role, content = msg.role, msg.content
        elif isinstance(msg, dict):
            role, content = msg.get("role"), msg.get("content")
        else:
            role, content = getattr(msg, "role", None), getattr(msg, "content", None)
        if not isinstance(content, str) or not content.strip():
            continue
        clean.append(ChatMessage(
            role=role if role in ("user", "assistant") else "user",
            content=content.strip(),
        ))
    return clean[-limit:] if limit > 0 else []


def format_context(entries: Iterable[IndexEntry]) -> str:
    return "".join(
        f"Page: {e.title}\nURL: {e.url}\nContent: {e.content}\n\n" for e in entries
    )


def build_instruction(context: str, bot_name: str, site_name: str) -> str:
    """Системный промпт: отвечать только по контенту сайта и честно признавать незнание."""
    return (
        f"You are \"{bot_name}\", a helpful assistant for the website \"{site_name}\". "
        "Answer the visitor's question using ONLY the website content provided below. "
        "If the answer isn't in the provided content, say you don't have that information "
        "and suggest they contact the site directly. "
        "Be friendly, concise, and helpful. Use markdown for formatting when useful.\n\n"
        "── WEBSITE CONTENT ──\n" + context
    )


class ChatEngine:
    """Движок ответов чат-бота сайта.

    - local: поиск по ключевым словам и подстрокам в индексе + выдержка с цитатой
    - provider: контекст из индекса передаётся внешней LLM; при любом сбое
      ответ строится локально
    - fallback: дружелюбное «не знаю» из фиксированного набора
    """
    def __init__(
        self,
        indexer: ContentIndexer,
        ret_cfg: Optional[RetrievalConfig] = None,
        llm_cfg: Optional[LLMConfig] = None,
        provider: Optional[CompletionProvider] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._indexer = indexer
        self._ret_cfg = ret_cfg or RetrievalConfig()
        self._llm_cfg = llm_cfg or LLMConfig()
        self._provider = provider
        self._rng = rng or random.Random()

    def get_response(self, query: str, history: Optional[Iterable[object]] = None) -> ChatResponse:
        """Главная точка входа: ответ на вопрос посетителя. Никогда не бросает исключений."""
        if self._provider is not None:
            return self.get_ai_response(query, history)
        return self.get_local_response(query)

    # ── Локальный режим ──────────────────────────────────────────────────────

    def _query_keywords(self, query: str) -> List[str]:
        return extract_query_keywords(query, min_length=self._indexer.cfg.min_word_length)

    def get_local_response(self, query: str) -> ChatResponse:
        keywords = self._query_keywords(query)
        if not keywords:
            return self._fallback()

        ranked = rank_entries(keywords, self._indexer.get_index())
        if not ranked:
            return self._fallback()

        best = ranked[0][0]
        sources = [Source(title=e.title, url=e.url) for e, _ in ranked[: self._ret_cfg.max_sources]]
        return ChatResponse(
            answer=self.build_local_answer(best, keywords),
            sources=sources,
            mode="local",
        )

    def build_local_answer(self, entry: IndexEntry, keywords: Sequence[str]) -> str:
        """Собирает ответ из предложений лучшей записи, где встречаются ключевые слова."""
        relevant: List[str] = []
        for sentence in split_sentences(entry.content):
            lower = sentence.lower()
            if any(kw in lower for kw in keywords):
                relevant.append(sentence)
            if len(relevant) >= self._ret_cfg.max_sentences:
                break

        if relevant:
            excerpt = " ".join(relevant)
        else:
            limit = self._ret_cfg.excerpt_max_chars
            excerpt = entry.content[:limit]
            if len(entry.content) > limit:
                excerpt += ELLIPSIS

        return (
            f"Based on our **{entry.title}** page:\n\n"
            f"{excerpt}\n\n"
            f"📄 [Read more]({entry.url})"
        )

    # ── Режим с внешней LLM ──────────────────────────────────────────────────

    def get_ai_response(self, query: str, history: Optional[Iterable[object]] = None) -> ChatResponse:
        provider = self._provider
        if provider is None or not provider.is_configured:
            logger.info("No API key configured for provider, answering locally")
            return self.get_local_response(query)

        index = self._indexer.get_index()
        context = format_context(self.get_top_context(self._query_keywords(query), index))
        instruction = build_instruction(context, self._llm_cfg.bot_name, self._llm_cfg.site_name)
        messages = [
            {"role": m.role, "content": m.content}
            for m in trim_history(history, self._ret_cfg.history_limit)
        ]
        try:
            result = provider.submit(instruction, messages, query.strip())
        except Exception as exc:
            # контракт провайдера нарушен, но наружу ошибка не уходит
            logger.exception("Provider %s raised instead of returning a failure", provider.name)
            result = ProviderResult.failure(f"{type(exc).__name__}: {exc}")
        return self.resolve(result, query)

    def get_top_context(self, keywords: Sequence[str], index: Index) -> List[IndexEntry]:
        """До context_top_n лучших записей; если совпадений нет, первые записи индекса."""
        limit = self._ret_cfg.context_top_n
        ranked = rank_entries(keywords, index) if keywords else []
        if ranked:
            return [entry for entry, _ in ranked[:limit]]
        return list(index[:limit])

    def resolve(self, result: ProviderResult, query: str) -> ChatResponse:
        """Единая точка деградации: успешный ответ провайдера или локальный режим."""
        if result.ok:
            name = self._provider.name if self._provider is not None else "provider"
            return ChatResponse(answer=result.answer, sources=[], mode=name)
        logger.warning("Provider failed (%s), falling back to local answer", result.error)
        return self.get_local_response(query)

    # ── Запасной ответ ───────────────────────────────────────────────────────

    def fallback_message(self) -> str:
        return self._rng.choice(FALLBACK_MESSAGES)

    def _fallback(self) -> ChatResponse:
        return ChatResponse(answer=self.fallback_message(), sources=[], mode="fallback")
