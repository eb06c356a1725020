from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from tradejournal.utils.config import get_settings


def setup_logging() -> None:
    settings = get_settings()

    os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.log_file, mode="a"),
        ],
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def summarize_payload(data: dict[str, Any], limit: int = 80) -> dict[str, Any]:
    """Shorten free-text journal fields before they reach the log."""
    summary = {}
    for key, value in data.items():
        if isinstance(value, str) and len(value) > limit:
            summary[key] = value[:limit] + "..."
        elif isinstance(value, list):
            summary[key] = f"<{len(value)} items>"
        elif isinstance(value, dict):
            summary[key] = summarize_payload(value, limit)
        else:
            summary[key] = value
    return summary
