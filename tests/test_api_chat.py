"""
Тесты эндпоинта /chat FastAPI-приложения.

Сценарии:
- Быстрый тест (мок движка) — проверяет проводку и формат ответа
- Реальный движок на временном индексе — ответ с источником
- Пустое сообщение -> HTTP 400, ошибка движка -> HTTP 500

Запуск тестов:
  pytest -q tests/test_api_chat.py

Пример ручного запроса (после запуска uvicorn app.main:app):
  curl -X POST http://localhost:8000/chat \
       -H 'Content-Type: application/json' \
       -d '{
             "message": "What are your pricing plans?",
             "history": [{"role": "user", "content": "Hi"}]
           }'
"""

from typing import Any, List

from fastapi.testclient import TestClient

from app.main import app
from site_chat.config import IndexingConfig
from site_chat.engine import ChatEngine, ChatResponse, Source
from site_chat.indexer import ContentIndexer, Document


class _DummyEngine:
    """Простой мок движка, без индекса и внешних API."""

    def __init__(self) -> None:
        self.calls: List[Any] = []

    def get_response(self, query: str, history: Any = None) -> ChatResponse:
        self.calls.append((query, history))
        return ChatResponse(
            answer=f"[dummy-answer] {query}",
            sources=[Source(title="Dummy", url="/dummy")],
            mode="local",
        )


def test_health() -> None:
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "ok"}


def test_chat_happy_path_mocked(monkeypatch) -> None:
    from app import main as app_main

    engine = _DummyEngine()
    monkeypatch.setattr(app_main, "get_engine", lambda: engine)

    client = TestClient(app)
    payload = {
        "message": "  What is RAG?  ",
        "history": [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}],
    }
    resp = client.post("/chat", json=payload)

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["answer"] == "[dummy-answer] What is RAG?"
    assert data["sources"] == [{"title": "Dummy", "url": "/dummy"}]
    assert data["mode"] == "local"
    assert isinstance(data["took_ms"], int) and data["took_ms"] >= 0
    assert engine.calls[0][1] == payload["history"]


def test_chat_with_real_engine(monkeypatch) -> None:
    from app import main as app_main

    indexer = ContentIndexer(IndexingConfig())
    indexer.build_index([
        Document(
            id="1",
            title="Pricing Plans",
            url="/pricing",
            body="Our pricing starts at $10 per month. We also offer annual discounts.",
        )
    ])
    monkeypatch.setattr(app_main, "get_engine", lambda: ChatEngine(indexer=indexer))

    client = TestClient(app)
    resp = client.post("/chat", json={"message": "pricing"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["answer"].startswith("Based on our **Pricing Plans** page:")
    assert data["sources"] == [{"title": "Pricing Plans", "url": "/pricing"}]


def test_chat_empty_message_is_rejected(monkeypatch) -> None:
    from app import main as app_main

    monkeypatch.setattr(app_main, "get_engine", lambda: _DummyEngine())
    client = TestClient(app)
    resp = client.post("/chat", json={"message": "   "})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Empty message."


def test_chat_error_translates_to_500(monkeypatch) -> None:
    from app import main as app_main

    class _FailEngine(_DummyEngine):
        def get_response(self, query: str, history: Any = None) -> ChatResponse:  # type: ignore[override]
            raise RuntimeError("engine exploded")

    monkeypatch.setattr(app_main, "get_engine", lambda: _FailEngine())
    client = TestClient(app)
    resp = client.post("/chat", json={"message": "pricing"})
    assert resp.status_code == 500
    assert "detail" in resp.json()
