"""
Logging configuration for pinboundary.

Boundary generation talks to two external providers and silently falls back
when one of them misbehaves. The logs are the only place those fallbacks are
visible, so every module (engine, CLI, API) writes through one named logger.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "pinboundary"


def get_logger() -> logging.Logger:
    # Shared accessor so modules never hard-code the logger name.
    return logging.getLogger(LOGGER_NAME)


def configure_logging(log_dir: Path | None, level: str = "INFO") -> logging.Logger:
    # Use a named logger so we can control formatting/handlers without touching the root logger.
    logger = get_logger()
    # Normalize log level strings like "info" -> "INFO" to match logging's expectations.
    logger.setLevel(level.upper())
    # Disable propagation so logs are not duplicated by ancestor/root handlers.
    logger.propagate = False

    # Add handlers only once so repeated imports (e.g., uvicorn reload) do not duplicate logs.
    if not logger.handlers:
        fmt = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # StreamHandler prints to stderr so CLI users see fallbacks as they happen.
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        stream.setLevel(level.upper())
        logger.addHandler(stream)

        # The file handler is optional: library callers may not want files written.
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir / "pinboundary.log", encoding="utf-8")
            file_handler.setFormatter(fmt)
            file_handler.setLevel(level.upper())
            logger.addHandler(file_handler)

    return logger
