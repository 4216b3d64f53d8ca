#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Настройка логирования приложения."""

import logging
import os
from pathlib import Path


def setup_logging() -> None:
    """Настроить логирование в консоль и, если задан SITE_CHAT_LOG_FILE, в файл."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level_name = os.getenv("SITE_CHAT_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    log_file = os.getenv("SITE_CHAT_LOG_FILE")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
