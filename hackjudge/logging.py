from __future__ import annotations

import logging
import sys

# Client libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )

    # Avoid duplicate handlers on reload
    root.handlers.clear()
    root.addHandler(handler)

    quiet_level = numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
