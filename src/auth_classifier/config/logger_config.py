import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "auth_classifier"


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """
    Attach a Rich handler to the package logger.

    Safe to call more than once: the handler is only added the first time,
    later calls just adjust the level.

    Args:
        verbose: DEBUG when True, INFO otherwise
        console: Console to log to, defaults to stderr

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
