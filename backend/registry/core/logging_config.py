from __future__ import annotations

import logging

from registry.core.config import Settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.DEBUG else logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
