"""
Logging setup for the tfswitch command.

Progress lines ("Switched terraform to version ...") are printed to stdout as
plain text; warnings and errors get a level prefix, colored on a terminal.
An optional log file captures everything at DEBUG.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "tfswitch"


class ConsoleFormatter(logging.Formatter):
    """Plain INFO lines, "LEVEL: message" for everything else."""

    COLORS = {
        "DEBUG": "\033[36m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__("%(message)s")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno == logging.INFO:
            return message
        prefix = f"{record.levelname}:"
        if self.use_colors:
            prefix = f"{self.COLORS.get(record.levelname, '')}{prefix}{self.RESET}"
        return f"{prefix} {message}"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the tfswitch logger. Safe to call more than once.

    Args:
        verbose: Show DEBUG lines on the console
        quiet: Only show warnings and errors on the console
        log_file: Optional file that receives every record at DEBUG

    Returns:
        The "tfswitch" logger
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else console_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ConsoleFormatter(use_colors=sys.stdout.isatty()))
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
