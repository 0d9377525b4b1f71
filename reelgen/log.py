"""Structured JSON logging via structlog.

Every generation event carries: request_id, provider, error_kind (on
failure) and elapsed_ms where relevant. Credentials never reach the output.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(json_output: bool = True):
    """Configure structlog for the whole process."""
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _sanitize_sensitive_data,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

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
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def request_context(request_id: str, provider: str = "", **extra):
    """Bind request-level context for log calls made inside the block.

    asyncio tasks copy the context on creation, so each batch item gets
    its own binding.
    """
    return structlog.contextvars.bound_contextvars(
        request_id=request_id,
        provider=provider,
        **extra,
    )


# ---------------------------------------------------------------------------
# Sensitive data sanitization
# ---------------------------------------------------------------------------

_SENSITIVE_KEYS = {
    "api_key", "secret", "password", "token", "authorization", "bearer",
}


def _sanitize_sensitive_data(logger, method_name, event_dict):
    """Remove sensitive data from log output."""
    for key in list(event_dict.keys()):
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            event_dict[key] = "***REDACTED***"
    return event_dict
