"""Logging utilities for snapvc.

Modules get a structlog logger that renders key/value events onto a
stdlib ``logging`` logger in the ``snapvc`` namespace. Nothing is
emitted until a handler is attached, either by the host application or
by ``configure_logging()`` (which the CLI calls).
"""

import logging
import sys
from typing import TYPE_CHECKING, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

ROOT_LOGGER = "snapvc"

_PROCESSORS: list[structlog.typing.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
]


def get_logger(name: str) -> "BoundLogger":
    """Create a structlog logger bound to the stdlib logger ``name``.

    Does not touch global structlog configuration.
    """
    return cast(
        "BoundLogger",
        structlog.wrap_logger(
            logging.getLogger(name),
            processors=_PROCESSORS,
            wrapper_class=structlog.stdlib.BoundLogger,
        ),
    )


def configure_logging(level: int, stream: TextIO | None = None) -> logging.Handler:
    """Send snapvc log events at ``level`` and above to ``stream``.

    Replaces any handler installed by a previous call.

    Returns:
        The installed handler.
    """
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        if getattr(handler, "_snapvc", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._snapvc = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return handler
