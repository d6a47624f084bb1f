"""
Log sink setup for conversion sessions.

A session is one log directory holding `<context>.log`. The file sink records
everything at DEBUG, so renderer diagnostics streamed in debug mode end up
next to the session header describing which renderer produced them.
Context-specific wrappers should be defined in contexts/{context}/logger.py.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

HEADER_RULE = "=" * 60


def setup_logger(
    context_name: str,
    log_dir: Path,
    details: Optional[Mapping[str, object]] = None,
    console: bool = True,
    console_level: str = "INFO",
) -> Path:
    """
    Start a logging session for a context.

    Replaces any existing sinks with a DEBUG-level file sink and, optionally,
    a console sink, then writes the session header.

    Args:
        context_name: Context identifier (e.g., "convert"); names the log file
        log_dir: Directory for this logging session (created if missing)
        details: Session details appended to the header, in order
        console: Also log to stderr
        console_level: Minimum level for the console sink

    Returns:
        Path to log file

    Example:
        from wkconvert.utils.logger import setup_logger

        log_file = setup_logger(
            context_name="convert",
            log_dir=Path("outs/logs/convert_20260101_120000"),
            details={"Renderer": "/usr/local/bin/wkhtmltopdf"},
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    if console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_session_header(context_name, log_file, details)

    return log_file


def log_session_header(
    context_name: str,
    log_file: Path,
    details: Optional[Mapping[str, object]] = None,
) -> None:
    """Write the block that opens a session: context, start time, log file, then `details`."""
    logger.info(HEADER_RULE)
    logger.info(f"Session: {context_name}")
    logger.info(f"Started: {datetime.now().isoformat(timespec='seconds')}")
    logger.info(f"Log file: {log_file}")
    logger.info(f"Python: {sys.version.split()[0]}")
    for key, value in (details or {}).items():
        logger.info(f"{key}: {value}")
    logger.info(HEADER_RULE)
