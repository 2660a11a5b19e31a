"""Structured logging setup.

Routes both ``logging.getLogger()`` and ``structlog.get_logger()`` through
one handler: coloured console output in dev mode, JSON otherwise.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", dev_mode: bool = False) -> None:
    """Configure structlog and stdlib logging. Call once at startup."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    # ConsoleRenderer formats exceptions itself; JSON needs them pre-rendered.
    if dev_mode:
        final_processors: list[structlog.types.Processor] = [structlog.dev.ConsoleRenderer()]
    else:
        final_processors = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *final_processors,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for noisy_logger in ("httpx", "httpcore", "anthropic"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
