"""Structured logging for the CLI — structlog rendered through stdlib logging."""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOGGER_NAME = "monorepo_alias"


def setup_logging(level: str | None = None) -> None:
    """Route ``monorepo_alias.*`` logs to stderr.

    Reads from environment variables:
        MONOREPO_ALIAS_LOG_LEVEL  — log level (default: INFO), *level* overrides it
        MONOREPO_ALIAS_LOG_FORMAT — console | json (default: console)
    """
    log_level = (level or os.environ.get("MONOREPO_ALIAS_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("MONOREPO_ALIAS_LOG_FORMAT", "console").lower()

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout carries command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers[:] = [handler]
    logger.setLevel(log_level)
    logger.propagate = False
