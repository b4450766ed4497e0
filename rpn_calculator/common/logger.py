"""Shared logger for the calculator package."""
import logging
import os

LOG_LEVEL_ENV: str = "RPN_CALCULATOR_LOG_LEVEL"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _build_logger(name: str = "rpn_calculator") -> logging.Logger:
    """
    Create the package logger, writing to stderr.

    The level is read from the ``RPN_CALCULATOR_LOG_LEVEL`` environment variable
    and defaults to WARNING so the interactive prompt stays quiet.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    log.setLevel(os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())

    # Avoid duplicated handlers when the module is re-imported in a worker process
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)

    return log


logger: logging.Logger = _build_logger()
