"""Logging setup for the biblint command line."""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "biblint"

# bibtexparser reports every non-standard entry type it meets at WARNING
_NOISY_LOGGERS = ("bibtexparser",)


def setup_logging(
    verbose: bool = False,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """Attach handlers to the biblint package logger.

    Only the ``biblint`` logger is configured, so applications embedding the
    library keep control of the root logger. Records go to stderr and never
    mix with reports printed on stdout.

    Args:
        verbose: Log DEBUG records (token, block and diagnostic counts)
            instead of warnings only
        format_string: Custom format string for log messages
        log_file: Optional file path to also write logs to

    Returns:
        The configured package logger
    """
    if format_string is None:
        format_string = "%(levelname)s %(name)s: %(message)s"
    formatter = logging.Formatter(format_string)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)

    return logger
