"""
Custom logging configuration to suppress probe endpoint logs
"""

import logging
import logging.config
from typing import Any, Dict, Iterable

PROBE_PATHS = ("/health", "/metrics")


class ProbePathFilter(logging.Filter):
    """Filter to suppress access logs of liveness and metrics probes."""

    def __init__(self, paths: Iterable[str] = PROBE_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop uvicorn access records for GET requests on probe paths."""
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        if "GET" not in message:
            return True
        return not any(f"{path} " in message for path in self.paths)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with probe log suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "probe_filter": {
                "()": ProbePathFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["probe_filter"]
            }
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            # Session churn is logged at DEBUG; the sweeper summarizes at INFO
            "sessionkeeper": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration to the running process."""
    logging.config.dictConfig(get_logging_config(level))
