from __future__ import annotations

"""
Logging Configuration Models.

Settings consumed by 'configure_logging'. The CLI builds one from its
'--debug' and '--log-file' flags; host build tools may pass their own.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable logging setup.

    Attributes:
        level: Minimum severity captured by every handler.
        console: Emit records on stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size threshold before the log file rolls over.
        backup_count: Rolled-over files kept next to the active one.
        console_fmt: Format of stderr records.
        file_fmt: Format of log-file records.
        datefmt: Timestamp format of log-file records.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def level_for_verbosity(debug: bool, quiet: bool = False) -> str:
    """Map CLI verbosity flags to a level name."""
    if debug:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return "INFO"
