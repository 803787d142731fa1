"""Logging setup for keyset pagination."""

import logging
from typing import Optional

from .config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings.
    
    Args:
        settings: Settings to read level and format from, defaults to the
            global settings instance
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format
    )
    logging.getLogger().setLevel(getattr(logging, settings.log_level))
