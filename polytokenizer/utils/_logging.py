from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, log_level: str = "WARNING", json_output: bool = True) -> None:
    """Route structlog through stdlib logging, rendered as JSON or for the console.

    Library code never calls this; applications and the CLI do.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if json_output:
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
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    pkg_logger = logging.getLogger("polytokenizer")
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(getattr(logging, log_level.upper()))
    pkg_logger.propagate = False


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger backed by the stdlib logger *name*.

    Events honour the level and handlers of the ``polytokenizer`` stdlib
    logger. Until the host application configures logging (or calls
    :func:`configure_logging`), debug events are dropped and warnings follow
    the stdlib defaults.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
