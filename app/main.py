#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging
import time
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from site_chat.config import ChatConfig
from site_chat.engine import ChatEngine
from site_chat.indexer import ContentIndexer
from site_chat.llm import make_provider
from site_chat.logging_utils import setup_logging
from site_chat.sources import DirectoryDocumentSource

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Site Chat API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_settings: Optional[ChatConfig] = None
_indexer: Optional[ContentIndexer] = None
_engine: Optional[ChatEngine] = None


def get_settings() -> ChatConfig:
    global _settings
    if _settings is None:
        _settings = ChatConfig.from_env()
    return _settings


def get_indexer() -> ContentIndexer:
    """Один индексатор на процесс: индекс живёт между запросами."""
    global _indexer
    if _indexer is None:
        cfg = get_settings()
        source = DirectoryDocumentSource(cfg.data_dir, post_types=cfg.indexing.post_types)
        _indexer = ContentIndexer(cfg.indexing, document_loader=source)
    return _indexer


def get_engine() -> ChatEngine:
    global _engine
    if _engine is None:
        cfg = get_settings()
        _engine = ChatEngine(
            indexer=get_indexer(),
            ret_cfg=cfg.retrieval,
            llm_cfg=cfg.llm,
            provider=make_provider(cfg.llm),
        )
    return _engine


class HistoryMessage(BaseModel):
    """Одно сообщение предыдущего диалога."""
    role: str = "user"
    content: str = ""


class ChatRequest(BaseModel):
    """Тело запроса: вопрос посетителя и (опционально) история диалога."""
    message: str
    history: List[HistoryMessage] = Field(default_factory=list)


class SourceItem(BaseModel):
    title: str
    url: str


class ChatResponseModel(BaseModel):
    """Ответ: текст, источники, режим, который дал ответ, и длительность."""
    answer: str
    sources: List[SourceItem]
    mode: str
    took_ms: int


class IngestRequest(BaseModel):
    """Тело запроса на полную перестройку индекса."""
    data_dir: Optional[str] = None
    post_types: Optional[List[str]] = None
    max_documents: Optional[int] = None


class IngestResponse(BaseModel):
    """Ответ на перестройку индекса: число записей и длительность."""
    entries_indexed: int
    took_ms: int
    detail: str = "ok"


@app.get("/health")
def health() -> Dict[str, str]:
    """Простой health-check эндпоинт для мониторинга/оркестраторов."""
    return {"status": "ok"}


@app.post("/chat", response_model=ChatResponseModel)
def chat(req: ChatRequest) -> ChatResponseModel:
    """Отвечает на вопрос посетителя по контенту сайта."""
    message = req.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Empty message.")

    t0 = time.time()
    try:
        resp = get_engine().get_response(message, [m.model_dump() for m in req.history])
    except Exception as e:
        logger.exception("Chat request failed")
        raise HTTPException(status_code=500, detail=str(e))

    took_ms = int((time.time() - t0) * 1000)
    return ChatResponseModel(
        answer=resp.answer,
        sources=[SourceItem(title=s.title, url=s.url) for s in resp.sources],
        mode=resp.mode,
        took_ms=took_ms,
    )


@app.post("/ingest", response_model=IngestResponse)
def ingest(req: IngestRequest) -> IngestResponse:
    """Перестраивает индекс целиком по директории контента.

    Вызывается при изменении контента сайта или вручную.
    """
    t0 = time.time()
    cfg = get_settings()
    post_types = req.post_types or cfg.indexing.post_types
    try:
        source = DirectoryDocumentSource(
            req.data_dir or cfg.data_dir,
            post_types=post_types,
            max_documents=req.max_documents,
        )
        index = get_indexer().build_index(source.load(), post_types=post_types)
        took_ms = int((time.time() - t0) * 1000)
        return IngestResponse(entries_indexed=len(index), took_ms=took_ms)
    except Exception as e:
        logger.exception("Index rebuild failed")
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=False)
