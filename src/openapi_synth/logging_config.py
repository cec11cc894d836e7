"""Logging configuration for the command line tool."""

import logging.config
import sys
from typing import Any


def setup_logging(verbose: bool = False) -> None:
    """Send package logs to stderr; debug level when verbose."""
    log_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {"format": "%(levelname)s: %(message)s"},
            "detailed": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG" if verbose else "INFO",
                "formatter": "detailed" if verbose else "simple",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "openapi_synth": {
                "handlers": ["console"],
                "level": "DEBUG" if verbose else "INFO",
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(log_config)
