"""Loguru sinks for the gate's entry points.

Records from the ``skygate`` namespace are dropped until ``setup_logging``
runs, so importing the package as a library stays silent. The handler and
the CLI install one stderr sink and, when asked, a plain-text file sink.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from loguru import logger

logger.disable("skygate")

type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> "
    "<level>{level: <7}</level> "
    "<cyan>[{extra[component]}]</cyan> {message}"
)

FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} {level} [{extra[component]}] {message}"


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Where gate records go and from which level.

    Args:
        level: Minimum level for every sink.
        console: Write to stderr.
        file: Also append to this file.
    """

    level: LogLevel = "INFO"
    console: bool = True
    file: Path | None = None


def setup_logging(config: LogConfig) -> list[int]:
    """Install the configured sinks and return their ids for ``teardown_logging``."""
    # loguru's default sink is unfiltered and would echo every record at DEBUG
    logger.remove()
    logger.configure(extra={"component": "skygate"})
    logger.enable("skygate")

    sinks: list[int] = []
    if config.console:
        sinks.append(
            logger.add(sys.stderr, level=config.level, format=CONSOLE_FORMAT, filter="skygate")
        )
    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        sinks.append(
            logger.add(
                config.file,
                level=config.level,
                format=FILE_FORMAT,
                filter="skygate",
                diagnose=False,
            )
        )
    return sinks


def teardown_logging(sinks: list[int]) -> None:
    for sink in sinks:
        logger.remove(sink)
    logger.disable("skygate")


__all__ = ["LogConfig", "LogLevel", "setup_logging", "teardown_logging"]
