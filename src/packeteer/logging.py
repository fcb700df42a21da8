import logging
import sys
import json


def get_logger(name: str = __name__) -> logging.Logger:
    """Return a JSON-configured logger.

    Reuses existing handlers to avoid duplicates when called multiple times.
    The level follows ``PACKETEER_LOG_LEVEL`` (see :mod:`packeteer.core.config`).
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler(sys.stdout)
    fmt = json.dumps(
        {
            "ts": "%(asctime)s",
            "lvl": "%(levelname)s",
            "mod": "%(name)s",
            "msg": "%(message)s",
        }
    )
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(_configured_level())
    return logger


def _configured_level() -> int:
    from .core.config import get_settings

    level = logging.getLevelName(get_settings().log_level.upper())
    return level if isinstance(level, int) else logging.INFO
