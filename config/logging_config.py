"""
config/logging_config.py
Eve QPU: centralised logging configuration.

Usage in any module:
    from config.logging_config import configure_logging, get_logger
    configure_logging()          # call once at entry point
    log = get_logger("qpu.simulation")
    log.info("Starting simulation...")
"""
__author__ = "Rahul Rajesh 2360445"

import logging
import logging.config
import os

# ---------------------------------------------------------------------------
# Named loggers used across the project
# "qpu.simulation"  : dual-state simulator, operator expansion
# "qpu.analysis"    : matrix algebra, eigenvalues, distances, reports
# "qpu.driver"      : churn stream, report history, command line runner
# ---------------------------------------------------------------------------

LOG_DIR: str = "logs"

_LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "brief": {
            "format": "[%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "brief",
            "level": "INFO",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "level": "DEBUG",
            "filename": os.path.join(LOG_DIR, "qpu_audit.log"),
            "maxBytes": 10_485_760,   # 10 MB before rotating
            "backupCount": 5,
            "mode": "a",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "qpu.simulation": {
            "handlers": ["console", "file"],
            "level": "DEBUG",
            "propagate": False,
        },
        "qpu.analysis": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
        "qpu.driver": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
}


def configure_logging() -> None:
    """
    Initialise logging from the built-in config dict.
    Call this exactly ONCE at the entry point of any script
    (run_simulation.py or an interactive session).
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    logging.config.dictConfig(_LOGGING_CONFIG)


def get_logger(name: str) -> logging.Logger:
    """
    Convenience wrapper, returns a named logger.
    Recommended names: 'qpu.simulation', 'qpu.analysis', 'qpu.driver'
    """
    return logging.getLogger(name)
