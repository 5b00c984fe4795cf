"""Logging setup for the Podtally CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "podtally"


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    level: str = "INFO",
) -> logging.Logger:
    """Configure the ``podtally`` logger.

    Console output goes through rich on stderr so it never mixes with
    command output (tables, JSON). An optional file handler captures
    everything at DEBUG.

    Args:
        verbose: Force DEBUG on the console
        log_file: Optional path for a plain-text log file
        level: Console level when not verbose

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers when invoked repeatedly (tests, CliRunner)
    logger.handlers.clear()
    logger.propagate = False

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(logging.DEBUG if verbose else getattr(logging, level, logging.INFO))
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
