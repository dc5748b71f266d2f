"""
controlplane_sdk.tier0_core.logging
────────────────────────────────────
Structured logs with levels, context binding and key-material redaction.
Synthesis itself never logs; only the orchestration boundary does.

Minimal stack: structlog (stdout JSON or console)
Configure via: CONTROLPLANE_LOG_LEVEL, CONTROLPLANE_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog


# ── Configuration ─────────────────────────────────────────────────────────────

def _configure_structlog() -> None:
    log_level = os.getenv("CONTROLPLANE_LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("CONTROLPLANE_LOG_FORMAT", "json").lower()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _redact_processor,
    ]

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))


# ── Redaction processor ───────────────────────────────────────────────────────

REDACT_KEYS = frozenset({
    "private_key", "key_pem", "tls_client_key", "client_key",
    "tls_custom_ca", "inline_bytes", "secret", "token", "password",
})

REDACTED = "[REDACTED]"


def _redact_processor(
    logger: Any, method: str, event_dict: dict
) -> dict:
    """Strip key material from log records before output."""
    for key in list(event_dict.keys()):
        if key.lower() in REDACT_KEYS:
            event_dict[key] = REDACTED
    return event_dict


# ── Public API ────────────────────────────────────────────────────────────────

_configured = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger bound to the given name.

    Usage:
        log = get_logger(__name__)
        log.info("clusters.built", internal=3, policies=12)
        log.warning("clusters.warning", cluster="policy-ab12", code="invalid_custom_ca")
    """
    global _configured
    if not _configured:
        _configure_structlog()
        _configured = True
    return structlog.get_logger(name or __name__)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """
    Bind key-value pairs for the duration of a block, e.g. the role and
    policy count of one synthesis pass. Earlier bindings are restored on exit.

    Usage:
        with log_context(services="all", policies=12):
            log.info("clusters.built")
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
