"""
Тесты эндпоинта /ingest FastAPI-приложения.

Сценарии:
- Перестройка индекса по временной директории контента
- Переопределение типов контента в теле запроса
- Ошибка (директория не найдена) -> HTTP 500

Запуск тестов:
  pytest -q tests/test_api_ingest.py

Ручная проверка эндпоинта (после запуска uvicorn app.main:app):
  curl -X POST http://localhost:8000/ingest \
       -H 'Content-Type: application/json' \
       -d '{"data_dir": "./data/site"}'
"""

from pathlib import Path

from fastapi.testclient import TestClient

from app.main import app
from site_chat.config import ChatConfig


def _use_settings(monkeypatch, data_dir: Path) -> None:
    from app import main as app_main

    monkeypatch.setattr(app_main, "_settings", ChatConfig(data_dir=str(data_dir)))
    monkeypatch.setattr(app_main, "_indexer", None)
    monkeypatch.setattr(app_main, "_engine", None)


def test_ingest_rebuilds_index(monkeypatch, tmp_path: Path) -> None:
    # Подготавливаем временную директорию с контентом сайта
    docs_dir = tmp_path / "site"
    (docs_dir / "page").mkdir(parents=True)
    (docs_dir / "page" / "pricing.html").write_text(
        "<title>Pricing Plans</title><p>Our pricing starts at $10 per month.</p>"
    )
    (docs_dir / "post").mkdir()
    (docs_dir / "post" / "news.md").write_text("# News\n\nWe opened a new shop.")
    _use_settings(monkeypatch, docs_dir)

    client = TestClient(app)
    resp = client.post("/ingest", json={})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["entries_indexed"] == 2
    assert isinstance(data["took_ms"], int) and data["took_ms"] >= 0

    # Индекс живёт между запросами: /chat отвечает по нему
    resp = client.post("/chat", json={"message": "pricing"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["sources"] == [{"title": "Pricing Plans", "url": "/page/pricing"}]


def test_ingest_respects_max_documents(monkeypatch, tmp_path: Path) -> None:
    docs_dir = tmp_path / "site"
    (docs_dir / "page").mkdir(parents=True)
    for name in ("a", "b", "c"):
        (docs_dir / "page" / f"{name}.md").write_text(f"# Page {name}\n\nText.")
    _use_settings(monkeypatch, docs_dir)

    client = TestClient(app)
    resp = client.post("/ingest", json={"max_documents": 2})
    assert resp.status_code == 200, resp.text
    assert resp.json()["entries_indexed"] == 2


def test_ingest_respects_post_types(monkeypatch, tmp_path: Path) -> None:
    docs_dir = tmp_path / "site"
    (docs_dir / "page").mkdir(parents=True)
    (docs_dir / "post").mkdir()
    (docs_dir / "page" / "a.md").write_text("# Page A\n\nText.")
    (docs_dir / "post" / "b.md").write_text("# Post B\n\nText.")
    _use_settings(monkeypatch, docs_dir)

    client = TestClient(app)
    resp = client.post("/ingest", json={"post_types": ["post"]})
    assert resp.status_code == 200, resp.text
    assert resp.json()["entries_indexed"] == 1

    resp = client.post("/chat", json={"message": "page text"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["sources"] == [{"title": "Post B", "url": "/post/b"}]

def test_ingest_error_translates_to_500(monkeypatch, tmp_path: Path) -> None:
    _use_settings(monkeypatch, tmp_path / "missing")

    client = TestClient(app)
    resp = client.post("/ingest", json={"data_dir": str(tmp_path / "missing")})

    assert resp.status_code == 500
    assert "detail" in resp.json()
