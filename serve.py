#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Тонкий лаунчер сервера чат-бота: ядро лежит в пакете `site_chat`,
FastAPI-приложение в `app/main.py`.

Запуск сервера:
  uvicorn app.main:app --host 0.0.0.0 --port 8000

Конфигурация читается из переменных окружения SITE_CHAT_* (см. site_chat/config.py).
"""

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=False)
