"""Structured logging setup for the API process.

``configure_logging`` is called once from ``create_app``. Other modules only
call ``structlog.get_logger(__name__)``.
"""

from __future__ import annotations

import logging

import structlog

from hickory.config.settings import settings

_configured = False


def configure_logging(force: bool = False) -> None:
    """Setup structlog + stdlib bridging exactly once.

    Args:
        force: reconfigure even if already configured (tests/scripts only).
    """
    global _configured
    if _configured and not force:
        return

    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # stdlib records (werkzeug, sqlalchemy) go through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.contextvars.merge_contextvars],
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    structlog.configure(
        processors=shared_processors + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True


def bind_request_context(**values: str) -> None:
    """Bind request-scoped ids (request_id, user_id) into subsequent logs."""
    payload = {k: str(v) for k, v in values.items() if v is not None}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
