"""structlog setup: one stderr handler for structlog and stdlib records alike.

``--log-json`` switches the console renderer for JSON lines. ``--verbose``
opens the ``linkmend`` logger up to DEBUG; everything else stays at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

HANDLER_NAME = "linkmend"

_NOISY_LOGGERS = ("pluggy",)


def _pre_chain(log_json: bool) -> list[structlog.types.Processor]:
    stamp = structlog.processors.TimeStamper(fmt="iso" if log_json else "%H:%M:%S")
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        stamp,
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all logging through structlog's ProcessorFormatter.

    Safe to call repeatedly: the previous linkmend handler is replaced and
    handlers installed by anything else are left alone.
    """
    pre_chain = _pre_chain(log_json)
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
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
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("linkmend").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
