"""
Centralized logging configuration.

Library modules only ask for namespaced loggers through get_logger(); they
never attach handlers. Entry points (the scripts) call setup_logging() once
to decide where records go and how verbose they are.

All loggers live under the "ratesched." namespace so they can be filtered or
silenced as a group.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

_CONFIGURED = False


def setup_logging(level: str = "INFO",
                  log_file: Optional[Path] = None,
                  verbose: bool = False
                  ) -> None:
    """
    Configure the root logger for a ratesched run.

    Safe to call more than once; only the first call takes effect.

    :param level: "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL",
                  case-insensitive.
    :param log_file: Optional file to write alongside stderr. Its parent
                     directory is created if missing.
    :param verbose: Include logger name and line number in every line.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if verbose:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
    else:
        fmt = "%(asctime)s | %(levelname)-8s | %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger "ratesched.<name>"."""
    return logging.getLogger(f"ratesched.{name}")
