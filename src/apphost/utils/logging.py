"""
Logging configuration for the application host.

This module provides the process-level logging setup with structured logging
support, and the per-host LoggingConfiguration object that turns debug
categories into logger levels.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER_NAME = "apphost"

STANDARD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
STRUCTURED_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str | None = None,
    level: str | None = None,
    structured: bool = False,
    log_file: Path | None = None
) -> logging.Logger:
    """Get a module logger, optionally with its own handlers.

    Handlers are only attached when a level or a log file is given; module
    loggers otherwise propagate to the package logger configured by
    configure_root_logging.

    Args:
        name: Logger name (defaults to the package logger)
        level: Logging level (INFO, DEBUG, etc.)
        structured: Enable JSON structured logging
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or ROOT_LOGGER_NAME)

    if level is None and log_file is None:
        return logger

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, (level or "INFO").upper()))

    formatter = _make_formatter(structured)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_root_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Path | None = None
) -> None:
    """Configure logging for the whole process.

    Args:
        level: Root logging level
        structured: Enable JSON structured logging
        log_file: Optional log file path
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": STANDARD_FORMAT,
                "datefmt": DATE_FORMAT
            },
            "structured": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": STRUCTURED_FORMAT,
                "datefmt": DATE_FORMAT
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "structured" if structured else "standard",
                "stream": "ext://sys.stderr"
            }
        },
        "root": {
            "level": level,
            "handlers": ["console"]
        },
        "loggers": {
            ROOT_LOGGER_NAME: {
                "level": level,
                "handlers": ["console"],
                "propagate": False
            }
        }
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "structured" if structured else "standard",
            "filename": str(log_file)
        }
        config["root"]["handlers"].append("file")
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)


def _make_formatter(structured: bool) -> logging.Formatter:
    if structured:
        return JsonFormatter(fmt=STRUCTURED_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)


class LoggingConfiguration:
    """Logging settings owned by one host.

    Debug categories are short keys given on the command line
    (``-debugargs=application,features``) that map to logger names. The
    mapping lives on the instance, so two hosts in one process never share
    category registrations.
    """

    DEFAULT_CATEGORIES = {
        "application": f"{ROOT_LOGGER_NAME}.host",
        "builder": f"{ROOT_LOGGER_NAME}.builder",
        "features": f"{ROOT_LOGGER_NAME}.features",
        "configuration": f"{ROOT_LOGGER_NAME}.utils",
        "async": f"{ROOT_LOGGER_NAME}.core",
    }

    def __init__(
        self,
        level: str = "INFO",
        debug_categories: list[str] | None = None,
        log_file: Path | None = None,
        structured: bool = False
    ):
        self.level = level.upper()
        self.debug_categories = list(debug_categories or [])
        self.log_file = log_file
        self.structured = structured
        self._categories: dict[str, str] = dict(self.DEFAULT_CATEGORIES)
        self._file_handler: logging.Handler | None = None
        self._applied_loggers: list[str] = []

    @property
    def categories(self) -> dict[str, str]:
        """Known category keys and the logger names they enable."""
        return dict(self._categories)

    def register_feature_category(self, key: str, feature_type: type) -> None:
        """Map a debug category key to the module of a feature type."""
        self._categories[key.lower()] = feature_type.__module__

    def register_category(self, key: str, logger_name: str) -> None:
        """Map a debug category key to an explicit logger name."""
        self._categories[key.lower()] = logger_name

    def resolve_debug_loggers(self) -> list[str]:
        """Translate the configured debug categories into logger names.

        ``1`` or ``*`` enables the whole package. Unknown keys are taken as
        logger names.
        """
        names: list[str] = []
        for category in self.debug_categories:
            key = category.strip().lower()
            if not key:
                continue
            if key in ("1", "*"):
                return [ROOT_LOGGER_NAME]
            names.append(self._categories.get(key, category.strip()))
        return names

    def apply(self) -> None:
        """Apply levels and the optional log file handler."""
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.setLevel(getattr(logging, self.level, logging.INFO))

        for name in self.resolve_debug_loggers():
            logging.getLogger(name).setLevel(logging.DEBUG)
            self._applied_loggers.append(name)

        if self.log_file and self._file_handler is None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handler = logging.FileHandler(self.log_file)
            self._file_handler.setFormatter(_make_formatter(self.structured))
            package_logger.addHandler(self._file_handler)

    def close(self) -> None:
        """Detach the file handler installed by apply()."""
        if self._file_handler is not None:
            logging.getLogger(ROOT_LOGGER_NAME).removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
