"""Route relpack's log records to stderr through structlog.

Modules and plugins log with plain ``logging.getLogger(__name__)``. The
handler installed here renders those records with structlog, either as
console lines (the default, colored on a tty) or as one JSON object per
line when ``--log-json`` is given. Only the ``relpack`` logger tree is
lowered to DEBUG by ``--verbose``; third-party loggers stay at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler on the root logger, replacing any existing one.

    Args:
        verbose: Show relpack's DEBUG records, such as captured build output.
            Otherwise relpack logs from WARNING up.
        log_json: Render records as JSON lines instead of console text.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("relpack").setLevel(logging.DEBUG if verbose else logging.WARNING)
