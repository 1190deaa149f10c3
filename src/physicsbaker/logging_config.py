"""
Logging Configuration
=====================
Sets up the ``physicsbaker`` logger namespace for the CLI and for hosts that
embed the engine.

Model variants load on two QThreads at the same time, so every record carries
its thread name to keep their messages apart.
"""
import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Accepts a logging constant or its name (``"debug"``, ``"INFO"``...)."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    append: bool = False,
) -> logging.Logger:
    """
    Configures the 'physicsbaker' namespace logger.

    Args:
        level: Logging level, as a constant or a level name.
        log_file: Optional path to also save logs to.
        append: Keep earlier runs in ``log_file`` instead of truncating it.

    Returns:
        The namespace logger.
    """
    level = resolve_level(level)
    logger = logging.getLogger("physicsbaker")
    logger.setLevel(level)

    # Reconfiguring replaces the handlers from a previous run
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a" if append else "w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at {logging.getLevelName(level)}.")
    return logger
