"""
Centralized logging.

One place configures stdlib logging for the whole app; modules import
`logger` from here instead of calling `logging.getLogger` themselves.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from bitloot.core.settings import settings


@lru_cache
def initialize_logger() -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=str(settings.LOG_LEVEL).upper(),
    )
    return logging.getLogger("bitloot")


logger = initialize_logger()
