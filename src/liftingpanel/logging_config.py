"""
Logging Configuration
Sets up the package logger for command-line runs. Library modules only create
module loggers and never attach handlers themselves.
"""
import logging
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'liftingpanel' namespace.

    Args:
        level: Logging level, as a number (logging.DEBUG) or a name ("DEBUG").
        log_file: Optional path to also save the log to.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {name}")

    logger = logging.getLogger("liftingpanel")
    logger.setLevel(level)

    # Calling twice (tests, notebooks) must not duplicate every record
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized at level {logging.getLevelName(level)}.")
    return logger
