from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union


class _ClientNoiseFilter(logging.Filter):
    """
    Keep todo_client records; let third-party loggers (httpx, httpcore)
    through only at WARNING and above.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "todo_client" or record.name.startswith("todo_client."):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(
    level: Union[int, str, None] = None,
    *,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Configure root logging with one filtered stream handler.

    level defaults to TODO_LOG_LEVEL from settings. Existing root handlers are
    removed so repeated calls do not duplicate output. Returns the installed
    handler.
    """
    if level is None:
        from .settings import get_settings

        level = get_settings().log_level

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.addFilter(_ClientNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
    return handler
