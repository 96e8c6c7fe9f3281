# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def verbosity_to_level(verbosity: int) -> int:
    if verbosity < 0:
        return logging.WARNING
    if verbosity == 0:
        return logging.INFO
    return logging.DEBUG


def setup_logger(verbosity: int = 0) -> None:
    """
    Configure root logging for the command line entry points.

    `FIBPROOF_LOG` (e.g. `debug`, `warning`) overrides the level derived
    from the -v/-q flags.
    """
    level = verbosity_to_level(verbosity)
    override = os.environ.get("FIBPROOF_LOG")
    if override:
        level = logging.getLevelName(override.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
