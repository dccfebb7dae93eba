"""
Logging Configuration

Handler setup for the laser deorbit scripts. Library modules only create
loggers with logging.getLogger(__name__); the entry point decides where
their output goes by calling configure_logging() once.

The level can be preset with LASER_DEORBIT_LOG_LEVEL (DEBUG, INFO, ...).

Usage:
    from logging_config import configure_logging, get_logger

    configure_logging(level_from_env())
    logger = get_logger(__name__)
    logger.info("Campaign complete")
"""

import logging
import os
import sys
from typing import List, Mapping, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_ENV = "LASER_DEORBIT_LOG_LEVEL"


def level_from_env(default: int = logging.INFO, environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Logging level named by LASER_DEORBIT_LOG_LEVEL.

    Parameters
    ----------
    default : int
        Level used when the variable is unset
    environ : mapping, optional
        Environment to read from (default: os.environ)

    Returns
    -------
    int
        Logging level

    Raises
    ------
    ValueError
        If the variable names no known level
    """
    env = os.environ if environ is None else environ
    name = env.get(LOG_LEVEL_ENV)
    if not name:
        return default

    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"{LOG_LEVEL_ENV}={name!r} is not a logging level")
    return level


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Route every logger to stdout and, optionally, a file.

    Replaces handlers installed by an earlier call.

    Parameters
    ----------
    level : int
        Root logging level (e.g., logging.DEBUG, logging.INFO)
    log_file : str, optional
        Path to an additional log file
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
