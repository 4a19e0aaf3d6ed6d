"""Structured logging for gitreconcile.

structlog sits on top of the standard library so that GitPython's own
loggers and ours share one handler:

- console rendering by default, JSON when ``GITRECONCILE_LOG_FORMAT=json``
- level from ``GITRECONCILE_LOG_LEVEL`` unless the caller passes one
- every string value is passed through :func:`scrub_secrets` before rendering

Usage:
    from gitreconcile.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__)
    with pass_context(unit="docs", operation="update"):
        log.info("revision_resolved", sha="3f2a...")
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor

from gitreconcile.utils.security import scrub_secrets

__all__ = [
    "configure_logging",
    "get_logger",
    "pass_context",
]

LOG_FORMAT_ENV_VAR = "GITRECONCILE_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "GITRECONCILE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def _level_from_env() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def _json_requested() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def redact_event(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Scrub credentials out of every string field of a log event."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = scrub_secrets(value)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_event,
    ]


def _renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(*, force_json: bool = False, level: int | None = None) -> None:
    """Configure structlog and the root stdlib logger.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        force_json: Render JSON regardless of ``GITRECONCILE_LOG_FORMAT``.
        level: Explicit level; defaults to ``GITRECONCILE_LOG_LEVEL`` or WARNING.
    """
    use_json = force_json or _json_requested()
    log_level = level if level is not None else _level_from_env()

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter_processors: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if use_json:
        formatter_processors.append(structlog.processors.dict_tracebacks)
    formatter_processors.append(_renderer(use_json))

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=formatter_processors,
            foreign_pre_chain=_shared_processors(),
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # GitPython logs every command it runs at DEBUG
    logging.getLogger("git").setLevel(max(log_level, logging.INFO))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to *name*."""
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


@contextmanager
def pass_context(**context: Any) -> Iterator[None]:
    """Bind *context* to every log event emitted inside the block.

    Used around a reconciliation pass so that clone, resolve and push events
    all carry the unit and operation they belong to.
    """
    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
