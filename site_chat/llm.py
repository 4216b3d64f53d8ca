#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests
from openai import OpenAI, OpenAIError

from .config import LLMConfig

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ProviderResult:
    """Результат обращения к внешнему провайдеру: либо текст ответа, либо причина отказа."""
    answer: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.answer and self.answer.strip())

    @classmethod
    def failure(cls, error: str) -> "ProviderResult":
        return cls(answer=None, error=error)


class CompletionProvider(ABC):
    """Единый интерфейс внешней LLM: submit(instruction, history, query) -> ProviderResult.

    Реализация не должна выбрасывать исключения наружу: любая ошибка сети,
    статус не 2xx или пустой ответ превращаются в ProviderResult.failure.
    """
    name: str = "provider"

    def __init__(self, api_key: Optional[str]) -> None:
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def submit(self, instruction: str, history: Sequence[Dict[str, str]], query: str) -> ProviderResult:
        """Отправляет системный промпт, историю и новый вопрос."""

    @staticmethod
    def _history_messages(history: Sequence[Dict[str, str]], query: str) -> List[Dict[str, str]]:
        messages = [
            {"role": "user" if m.get("role") == "user" else "assistant", "content": m.get("content", "")}
            for m in history
        ]
        messages.append({"role": "user", "content": query})
        return messages


class OpenAIChatProvider(CompletionProvider):
    """Провайдер на OpenAI Chat Completions API (официальный SDK).

    Одна попытка на запрос (max_retries=0) с ограниченным таймаутом.
    """
    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(api_key)
        self._model = model_name
        self._base_url = base_url
        self._temperature = float(temperature)
        self._max_tokens = int(max_tokens)
        self._timeout = float(timeout)
        self._client: Optional[OpenAI] = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                base_url=self._base_url,
                api_key=self.api_key,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def _make_messages(self, instruction: str, history: Sequence[Dict[str, str]], query: str) -> List[Dict[str, str]]:
        """Формирует список сообщений (system + история + user) для Chat API."""
        return [{"role": "system", "content": instruction}] + self._history_messages(history, query)

    def submit(self, instruction: str, history: Sequence[Dict[str, str]], query: str) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult.failure("missing api key")
        try:
            resp = self._get_client().chat.completions.create(
                model=self._model,
                messages=self._make_messages(instruction, history, query),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except OpenAIError as exc:
            return ProviderResult.failure(f"{type(exc).__name__}: {exc}")

        if not getattr(resp, "choices", None):
            return ProviderResult.failure("response has no choices")
        text = (resp.choices[0].message.content or "").strip()
        if not text:
            return ProviderResult.failure("empty answer")
        return ProviderResult(answer=text)


class AnthropicProvider(CompletionProvider):
    """Провайдер на Anthropic Messages API (прямой HTTP-запрос через requests)."""
    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "claude-sonnet-4-5-20250929",
        base_url: str = "https://api.anthropic.com",
        max_tokens: int = 500,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(api_key)
        self._model = model_name
        self._url = base_url.rstrip("/") + "/v1/messages"
        self._max_tokens = int(max_tokens)
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def _make_payload(self, instruction: str, history: Sequence[Dict[str, str]], query: str) -> Dict[str, Any]:
        return {
            "model": self._model,
            "system": instruction,
            "messages": self._history_messages(history, query),
            "max_tokens": self._max_tokens,
        }

    def submit(self, instruction: str, history: Sequence[Dict[str, str]], query: str) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult.failure("missing api key")
        try:
            response = self._session.post(
                self._url,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                    "Content-Type": "application/json",
                },
                json=self._make_payload(instruction, history, query),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            return ProviderResult.failure(f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            return ProviderResult.failure(f"malformed body: {exc}")

        try:
            text = (payload["content"][0]["text"] or "").strip()
        except (KeyError, IndexError, TypeError):
            return ProviderResult.failure("response has no content")
        if not text:
            return ProviderResult.failure("empty answer")
        return ProviderResult(answer=text)


def make_provider(cfg: LLMConfig) -> Optional[CompletionProvider]:
    """Создаёт провайдера по режиму из конфигурации; для local возвращает None."""
    mode = (cfg.mode or "local").lower()
    if mode == "local":
        return None
    if mode in ("openai", "augmented"):
        return OpenAIChatProvider(
            api_key=cfg.api_key,
            model_name=cfg.openai_model,
            base_url=cfg.openai_base_url,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            timeout=cfg.timeout,
        )
    if mode == "anthropic":
        return AnthropicProvider(
            api_key=cfg.api_key,
            model_name=cfg.anthropic_model,
            base_url=cfg.anthropic_base_url,
            max_tokens=cfg.max_tokens,
            timeout=cfg.timeout,
        )
    raise ValueError(f"Unknown answer mode '{cfg.mode}'")
