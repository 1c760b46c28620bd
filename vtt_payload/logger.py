import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "vtt_payload"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Variables:
        • verbose
            usage: switches the package logger from INFO to DEBUG.
        • console
            usage: optional Rich console the handler writes to; stderr by default.
        • handler
            usage: Rich handler attached once to the package logger.

    Configures the package logger with a Rich handler and returns it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Clear existing handlers
    logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
