from __future__ import annotations

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

# ------------- Logger
console = Console(stderr=True)
FORMAT = "%(message)s"
logger = logging.getLogger("pingwatch")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Send pingwatch log lines through a Rich handler on ``console``."""
    logging.basicConfig(
        level=level,
        format=FORMAT,
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                markup=False,
                show_path=False,
            )
        ],
    )
