import logging
import os.path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from utils import config

_console: Optional[Console] = None


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the longest one seen so messages line up."""

    longest_name_length = 14

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


def _log_console() -> Optional[Console]:
    """
    Console writing to LOG_PATH, shared by all loggers.
    None logs to stderr, which the TUI paints over while it runs.
    """
    global _console
    if _console is None and config.LOG_PATH:
        folder = os.path.dirname(config.LOG_PATH)
        if folder:
            os.makedirs(folder, exist_ok=True)
        _console = Console(
            file=open(config.LOG_PATH, "a", encoding="utf-8"),
            width=120,
            color_system=None,
        )
    return _console


def get_logger(name=None) -> logging.Logger:
    """
    Logger writing through a RichHandler, one handler per name.
    DEBUG level when the DEBUG env var is set.
    """
    logger = logging.getLogger(name or "storefront")
    log_level = logging.DEBUG if config.DEBUG else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            console=_log_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        logger.addHandler(handler)
        logger.propagate = False

    return logger
