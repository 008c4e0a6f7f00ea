import logging
import sys

from pythonjsonlogger import jsonlogger

from tablexport.core.config import get_settings

JSON_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(module)s %(lineno)d %(message)s"
TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_formatter(log_format: str) -> logging.Formatter:
    """Returns a JSON formatter for LOG_FORMAT=json, a plain text one otherwise."""
    if log_format.lower() == "json":
        return jsonlogger.JsonFormatter(
            JSON_LOG_FORMAT,
            rename_fields={
                "levelname": "level",
                "asctime": "timestamp",
            },
        )
    return logging.Formatter(TEXT_LOG_FORMAT)


def setup_logger(name: str = "tablexport") -> logging.Logger:
    """
    Configures and returns a logger instance.
    Supports JSON formatting if LOG_FORMAT=json is set.
    """
    settings = get_settings()
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(build_formatter(settings.LOG_FORMAT))
        logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logger()
