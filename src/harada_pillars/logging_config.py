"""Logging setup for the planner CLI."""

import os
import sys

from loguru import logger

from harada_pillars.config import LOG_LEVEL_ENV_VAR

_FORMAT = "<level>{level: <7}</level> <dim>{name}</dim> | {message}"


def configure_logging(*, verbose: bool = False) -> None:
    """Route planner log records to stderr.

    ``verbose`` selects DEBUG. Otherwise the level comes from
    HARADA_PILLARS_LOG_LEVEL, defaulting to INFO. Records from other
    packages are dropped.
    """
    logger.remove()
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    logger.add(sys.stderr, level=level, format=_FORMAT, filter="harada_pillars")
