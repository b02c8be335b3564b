"""structlog configuration for dtbo-config.

All log output goes to stderr so stdout stays reserved for command
results (slot names, status lines, JSON documents):

- Human (default): short console lines, no timestamps
- JSON (--log-json): one JSON object per line, with ISO timestamps

Only the ``dtbocfg`` logger follows ``--debug``; third-party loggers stay
at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

_PACKAGE_LOGGER = "dtbocfg"


def configure_logging(
    *,
    debug: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and the stderr handler.

    Safe to call more than once per process; the root handler is replaced.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    renderer: structlog.types.Processor
    if log_json:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG if debug else logging.WARNING)
