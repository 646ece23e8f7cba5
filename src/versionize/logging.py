"""Structured logging for versionize.

Diagnostic output goes through structlog to stderr. It is independent of the
user-facing reporter: the reporter says what happened to the release, the log
says how (git commands, state transitions, resolution details).

Usage::

    from versionize.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
    log.debug("resolved baseline", version="1.0.0")
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, verbose: bool = False) -> None:
    """Configure structlog for versionize.

    Should be called once at startup, before any logging calls. Without
    ``verbose`` only warnings and errors are emitted.

    Args:
        verbose: Enable debug-level output.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def _configure_quiet_default() -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: str = "versionize") -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    When the host application has not configured structlog, only warnings and
    errors are emitted, through the standard library logger ``name``.
    """
    if not structlog.is_configured():
        _configure_quiet_default()
    return structlog.get_logger(name)


__all__ = [
    "configure_logging",
    "get_logger",
]
