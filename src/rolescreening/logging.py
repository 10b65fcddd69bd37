"""structlog setup and per-candidate log context."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output.

    Anything bound with ``candidate_context`` is merged into every event, so
    gate and engine logs carry the candidate being scored.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


@contextmanager
def candidate_context(candidate_id: str, role_id: str | None = None) -> Iterator[None]:
    with structlog.contextvars.bound_contextvars(candidate_id=candidate_id, role_id=role_id):
        yield
