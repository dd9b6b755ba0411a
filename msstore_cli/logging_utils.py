"""Logging setup for the CLI.

Diagnostics go through the standard logging module to stderr via Rich;
user-facing output is printed by the commands themselves.
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Configure process-wide logging for one invocation.

    Args:
        verbose: Log at DEBUG instead of WARNING
        console: Console the handler writes to (stderr by default)

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True, soft_wrap=True),
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
        tracebacks_suppress=[typer],
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logger = logging.getLogger("msstore_cli")
    logger.setLevel(level)
    return logger
