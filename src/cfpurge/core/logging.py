from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def _level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int = 0) -> None:
    """Route log records to standard error through rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=verbosity >= 2,
        markup=False,
    )
    logging.basicConfig(
        level=_level_for(verbosity),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
