#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Нормализация текста и извлечение ключевых слов для индекса и запросов."""

import re
from collections import Counter
from typing import List

from bs4 import BeautifulSoup

ELLIPSIS = "…"

# Общий список стоп-слов для профиля документа
DOCUMENT_STOP_WORDS = frozenset("""
    the be to of and a in that have i it for not on with he as you do at this
    but his by from they we say her she or an will my one all would there
    their what so up out if about who get which go me when make can like time
    no just him know take people into year your good some could them see
    other than then now look only come its over think also back after use two
    how our work first well way even new want because any these give day most
    us is are was were been being has had did does am more very much
""".split())

# Короткий список для вопросов посетителя
QUERY_STOP_WORDS = frozenset("""
    what where when how why who which is are was were do does did can could
    would should will the a an of in to for on at by with and or but not this
    that these those i me my you your we our they their it its hi hello hey
    please thanks thank tell about some any have has had get got much many
    more
""".split())

_ENCLOSED_SHORTCODE_RE = re.compile(r"\[([A-Za-z][\w-]*)(?:\s[^\]]*)?\].*?\[/\1\]", re.S)
_SHORTCODE_RE = re.compile(r"\[/?[A-Za-z][\w-]*(?:\s[^\]]*)?/?\](?!\()")
_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")


def clean_text(raw: str) -> str:
    """Убирает шорткоды и HTML, схлопывает пробелы."""
    if not raw:
        return ""
    text = _ENCLOSED_SHORTCODE_RE.sub(" ", raw)
    text = _SHORTCODE_RE.sub(" ", text)
    soup = BeautifulSoup(text, "html.parser")
    for element in soup(["script", "style", "head", "title"]):
        element.decompose()
    text = soup.get_text(separator=" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, max_chars: int) -> str:
    """Обрезает текст до max_chars по границе слова и добавляет многоточие.

    Если текст короче лимита, он возвращается без изменений.
    """
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    if not text[max_chars].isspace():
        space = cut.rfind(" ")
        cut = cut[:space] if space != -1 else ""
    return cut.rstrip() + ELLIPSIS


def split_words(text: str) -> List[str]:
    """Разбивает текст на слова в нижнем регистре (цифры словами не считаются)."""
    return _WORD_RE.findall(text.lower())


def split_sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if s]


def extract_keywords(text: str, limit: int = 20, min_length: int = 3) -> List[str]:
    """Возвращает до limit самых частотных значимых слов.

    При равной частоте порядок определяется первым вхождением слова.
    """
    counts = Counter(
        w for w in split_words(text)
        if len(w) >= min_length and w not in DOCUMENT_STOP_WORDS
    )
    return [word for word, _ in counts.most_common(limit)]


def extract_query_keywords(query: str, min_length: int = 3) -> List[str]:
    """Ключевые слова вопроса: без вопросительных стоп-слов и без повторов."""
    words = (
        w for w in split_words(query)
        if len(w) >= min_length and w not in QUERY_STOP_WORDS
    )
    return list(dict.fromkeys(words))
