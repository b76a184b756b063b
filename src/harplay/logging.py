"""Structured logging for harplay, built on structlog.

Log events go to stderr so they never mix with data written to stdout
(``--json`` output, exported documents).
"""

import sys
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, WrappedLogger

# stdlib loggers used by the replay transport
NETWORK_LOGGERS = ("httpx", "httpcore")


def add_log_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the log level to the event dict."""
    event_dict["level"] = "warning" if method_name == "warn" else method_name
    return event_dict


def _resolve_level(level: str) -> int:
    import logging as stdlib_logging

    resolved = stdlib_logging.getLevelName(level.upper())
    # getLevelName returns "Level X" for unknown names
    return resolved if isinstance(resolved, int) else stdlib_logging.INFO


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    *,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for harplay.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json_output: Render one JSON object per line instead of the
            console format.
        stream: Where to write; defaults to the current ``sys.stderr``.
    """
    output = stream or sys.stderr

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        colors = hasattr(output, "isatty") and output.isatty()
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )


def enable_network_debug() -> None:
    """Route httpx/httpcore debug records to stderr.

    The transport logs through the stdlib ``logging`` module rather than
    structlog, so it gets its own handler.
    """
    import logging

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    for name in NETWORK_LOGGERS:
        net_logger = logging.getLogger(name)
        net_logger.setLevel(logging.DEBUG)
        if not any(isinstance(h, logging.StreamHandler) for h in net_logger.handlers):
            net_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger, bound lazily so later configuration applies."""
    return structlog.get_logger(name)
