from __future__ import annotations

import logging
import sys


def ensure_console_logger(
    logger: logging.Logger,
    handler_name: str,
    *,
    level: int = logging.INFO,
) -> None:
    """Attach a single named handler writing to the current ``sys.stderr``.

    A handler installed by an earlier call is replaced, so repeated CLI
    invocations in one process never log to a stale stream.
    """

    for handler in list(logger.handlers):
        if getattr(handler, "name", None) == handler_name:
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.name = handler_name
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
