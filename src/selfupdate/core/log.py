"""Switching the library's log output on and off."""

import logging

from rich.logging import RichHandler

_handler: logging.Handler | None = None


def enable_log(level: int = logging.INFO) -> None:
    """Print selfupdate's log messages to stderr."""
    global _handler
    logger = logging.getLogger("selfupdate")
    if _handler is None:
        _handler = RichHandler(show_path=False)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(_handler)
    logger.setLevel(level)


def disable_log() -> None:
    """Stop printing selfupdate's log messages."""
    global _handler
    if _handler is not None:
        logging.getLogger("selfupdate").removeHandler(_handler)
        _handler = None
