import logging
from logging import config as logging_config

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("botocore", "boto3", "aiobotocore", "urllib3", "PIL", "multipart")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name: DEBUG cyan, INFO green, WARNING yellow, ERROR red."""

    COLOR_MAP = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        record.levelname = f"{self.COLOR_MAP.get(levelname, '')}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def build_logging_config(level: str = "INFO", colored: bool = True) -> dict:
    """dictConfig for the app.

    Domain events from ``eventsnap.events`` are already JSON, so they get a
    bare ``%(message)s`` handler and stay one parseable object per line.
    """
    app_formatter = {"format": "%(asctime)s %(levelname)-5s [%(name)s] %(message)s", "datefmt": DATE_FORMAT}
    if colored:
        app_formatter["()"] = "eventsnap.logging_config.ColoredFormatter"

    loggers = {
        "eventsnap.events": {"handlers": ["events"], "level": level, "propagate": False},
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
    }
    loggers.update({name: {"level": "WARNING"} for name in QUIET_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": app_formatter,
            "events": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "events": {"class": "logging.StreamHandler", "formatter": "events", "stream": "ext://sys.stdout"},
        },
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: str = "INFO", colored: bool = True) -> None:
    logging_config.dictConfig(build_logging_config(level.upper(), colored))


__all__ = ["build_logging_config", "configure_logging", "ColoredFormatter"]
