"""
Logging setup for the IncidentHub API.

Call ``configure_logging()`` once at process startup; every other module
just does ``logging.getLogger(__name__)``.
"""

import logging
from typing import Optional

from incidenthub.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def _parse_level(value: Optional[str]) -> int:
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, force: bool = False) -> logging.Logger:
    global _configured
    if _configured and not force:
        return logging.getLogger("incidenthub")

    logging.basicConfig(
        level=_parse_level(level or settings.LOG_LEVEL),
        format=LOG_FORMAT,
        force=force,
    )
    _configured = True
    return logging.getLogger("incidenthub")
