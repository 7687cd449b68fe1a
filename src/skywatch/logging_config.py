"""Centralized logging configuration."""

import logging

from skywatch.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL):
    """
    Configure a consistent logging format for the service and the
    third-party loggers it runs alongside.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # uvicorn installs its own handlers; route them through the same format
    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "fastapi"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        logger.propagate = False

        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
