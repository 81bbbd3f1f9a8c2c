"""Logging setup: structlog rendering on top of the stdlib ``logging`` tree.

Modules log through ``logging.getLogger(__name__)`` or
``structlog.get_logger(__name__)``. Both end up in one stderr handler,
rendered as console lines or, with ``--log-json``, one JSON object per line.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

# Applied to structlog events and to records from plain stdlib loggers alike.
_PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
]


def _renderer(log_json: bool) -> Processor:
    if log_json:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all simplebank logging to stderr.

    ``verbose`` lowers the ``simplebank`` logger to DEBUG, which shows every
    transfer step. Everything else stays at WARNING. SQL statements are
    logged only through ``[database] echo``. Calling this again replaces
    the previous handler.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("simplebank").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
